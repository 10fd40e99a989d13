"""
Adaptateur d'interrogation système macOS

Ce module encapsule les outils natifs macOS utilisés par les collecteurs :
- system_profiler pour le matériel, les applications, l'USB et les imprimantes
- defaults et profiles pour le compte iCloud et la gestion MDM
- brew pour le gestionnaire de paquets
- psutil pour les volumes montés et l'espace disque

Aucune méthode ne lève d'exception vers l'appelant : un échec donne
une structure vide.
"""

import os
import platform
import plistlib
import subprocess
from xml.parsers.expat import ExpatError
from typing import Any, Dict, List, Optional, Sequence, Tuple

import psutil


# Types de systèmes de fichiers considérés comme partages réseau
NETWORK_FS_TYPES = {"nfs", "smbfs", "afpfs", "webdav", "cifs", "ftp", "autofs"}

# Points de montage système masqués dans le Finder
HIDDEN_MOUNT_PREFIXES = ("/System/Volumes", "/private/var/vm", "/dev")


class SystemInquiry:
    """
    Accès en lecture seule aux informations système macOS

    Chaque appel est synchrone et peut bloquer (le profiler des applications
    prend plusieurs dizaines de secondes).
    """

    PROFILER = "/usr/sbin/system_profiler"
    DEFAULTS = "/usr/bin/defaults"
    PROFILES = "/usr/bin/profiles"

    def __init__(self, logger, command_timeout: float = 120):
        """
        Args:
            logger: Instance de AuditorLogger
            command_timeout: Timeout par défaut des commandes (secondes)
        """
        self.logger = logger
        self.command_timeout = command_timeout

    def run_command(self, args: Sequence[str], timeout: Optional[float] = None,
                    env: Optional[Dict[str, str]] = None) -> str:
        """
        Exécute une commande et retourne sa sortie standard

        Args:
            args: Commande et arguments
            timeout: Timeout en secondes (défaut de l'adaptateur si None)
            env: Variables d'environnement ajoutées à l'environnement courant

        Returns:
            str: Sortie de la commande, "" en cas d'échec
        """
        command_env = None
        if env:
            command_env = os.environ.copy()
            command_env.update(env)

        try:
            result = subprocess.run(
                list(args),
                capture_output=True,
                text=True,
                timeout=timeout or self.command_timeout,
                env=command_env
            )
        except subprocess.TimeoutExpired:
            self.logger.warning(f"Timeout pour la commande: {' '.join(args)}")
            return ""
        except (OSError, ValueError) as e:
            self.logger.debug(f"Commande indisponible '{' '.join(args)}': {e}")
            return ""

        if result.returncode != 0:
            self.logger.debug(f"Commande échouée: {' '.join(args)} (code: {result.returncode})")
            return ""

        return result.stdout

    # --- system_profiler ---

    def hardware_facts(self) -> Dict[str, str]:
        """
        Informations matériel sous forme clé/valeur

        Chaque ligne "Clé: Valeur" de la sortie texte de SPHardwareDataType
        devient une entrée (clé et valeur sans espaces superflus).
        """
        output = self.run_command([self.PROFILER, "SPHardwareDataType"])
        return parse_key_value_text(output)

    def profiler_items(self, data_type: str) -> List[Dict[str, Any]]:
        """
        Récupère la liste "_items" d'un type de données system_profiler

        Args:
            data_type: Type de données (ex: SPApplicationsDataType)

        Returns:
            list: Entrées récursives (_name, version, path, info, _items...)
        """
        output = self.run_command([self.PROFILER, "-xml", data_type])
        if not output:
            return []

        try:
            data = plistlib.loads(output.encode("utf-8"))
        except (plistlib.InvalidFileException, ValueError, ExpatError) as e:
            self.logger.warning(f"Sortie system_profiler illisible pour {data_type}: {e}")
            return []

        if isinstance(data, list) and data and isinstance(data[0], dict):
            items = data[0].get("_items", [])
            return items if isinstance(items, list) else []
        return []

    def applications(self) -> List[Dict[str, Any]]:
        return self.profiler_items("SPApplicationsDataType")

    def usb_devices(self) -> List[Dict[str, Any]]:
        return self.profiler_items("SPUSBDataType")

    def printers(self) -> List[Dict[str, Any]]:
        return self.profiler_items("SPPrintersDataType")

    # --- Volumes ---

    def mounted_volumes(self) -> List[Dict[str, Any]]:
        """
        Volumes montés visibles

        Returns:
            list: Dictionnaires {name, path, is_local, fstype}
        """
        volumes = []
        try:
            partitions = psutil.disk_partitions(all=True)
        except (OSError, RuntimeError) as e:
            self.logger.warning(f"Énumération des volumes impossible: {e}")
            return volumes

        for partition in partitions:
            mountpoint = partition.mountpoint
            if mountpoint.startswith(HIDDEN_MOUNT_PREFIXES):
                continue
            fstype = (partition.fstype or "").lower()
            if fstype in ("devfs", "nullfs"):
                continue
            volumes.append({
                "name": os.path.basename(mountpoint.rstrip("/")) or partition.device or "Unknown Volume",
                "path": mountpoint,
                "is_local": fstype not in NETWORK_FS_TYPES,
                "fstype": fstype
            })
        return volumes

    def root_volume_usage(self) -> Optional[Tuple[int, int]]:
        """Capacité totale et espace libre du volume racine, en octets"""
        try:
            usage = psutil.disk_usage("/")
        except OSError as e:
            self.logger.warning(f"Espace disque indisponible: {e}")
            return None
        return usage.total, usage.free

    def os_version(self) -> str:
        """Version lisible de macOS ("macOS 15.2 (24C101)")"""
        output = self.run_command(["/usr/bin/sw_vers"])
        facts = parse_key_value_text(output)
        version = facts.get("ProductVersion") or platform.mac_ver()[0]
        if not version:
            return f"{platform.system()} {platform.release()}".strip()

        build = facts.get("BuildVersion")
        return f"macOS {version} ({build})" if build else f"macOS {version}"

    # --- Compte iCloud et gestion ---

    def icloud_accounts(self) -> str:
        return self.run_command([self.DEFAULTS, "read", "MobileMeAccounts", "Accounts"], timeout=15)

    def configuration_profiles(self) -> str:
        return self.run_command([self.PROFILER, "SPConfigurationProfileDataType", "-json"], timeout=30)

    def enrollment_status(self) -> str:
        return self.run_command([self.PROFILES, "status", "-type", "enrollment"], timeout=15)

    def profiles_list(self) -> str:
        return self.run_command([self.PROFILES, "list"], timeout=15)

    # --- Homebrew ---

    def brew(self, brew_path: str, args: Sequence[str], timeout: float = 10) -> str:
        """
        Exécute une commande brew sans mise à jour automatique

        Args:
            brew_path: Chemin de l'exécutable brew
            args: Arguments (ex: ["list", "--formula", "-1"])
            timeout: Timeout en secondes

        Returns:
            str: Sortie de la commande, "" en cas d'échec
        """
        env = {
            "HOMEBREW_NO_AUTO_UPDATE": "1",
            "HOMEBREW_NO_INSTALL_CLEANUP": "1"
        }
        return self.run_command([brew_path, *args], timeout=timeout, env=env)


def parse_key_value_text(output: str) -> Dict[str, str]:
    """
    Convertit une sortie texte "Clé: Valeur" en dictionnaire

    Seule la première occurrence de ":" sépare la clé de la valeur ;
    les lignes sans valeur (titres de section) sont ignorées.
    """
    facts = {}
    for line in (output or "").splitlines():
        if ":" not in line:
            continue
        key, value = line.split(":", 1)
        key = key.strip()
        value = value.strip()
        if key and value:
            facts[key] = value
    return facts
