"""
Module de configuration pour l'auditeur de migration

Ce module gère la configuration de l'auditeur, incluant :
- Lecture du fichier de configuration
- Validation des paramètres
- Valeurs par défaut
- Chemins système (surchargeables pour les tests)
"""

import os
import sys
import configparser
from pathlib import Path
from typing import Dict, Any, List, Optional


class AuditorConfig:
    """
    Gestionnaire de configuration pour l'auditeur de migration

    Cette classe centralise la configuration du scan, des chemins système,
    de l'interface web et du logging.
    """

    def __init__(self, config_file: Optional[str] = None):
        """
        Initialise la configuration de l'auditeur

        Args:
            config_file: Chemin vers le fichier de configuration (optionnel)
        """
        self.config = configparser.ConfigParser()
        self.config_file = config_file or self._get_default_config_path()

        # Définir les valeurs par défaut
        self._set_defaults()

        # Charger la configuration depuis le fichier
        self._load_config()

    def _get_default_config_path(self) -> str:
        """
        Détermine le chemin par défaut du fichier de configuration selon la plateforme

        Returns:
            str: Chemin vers le fichier de configuration
        """
        if sys.platform == "darwin":
            # macOS: configuration par utilisateur
            return os.path.join(
                str(Path.home()),
                "Library",
                "Application Support",
                "Migration Auditor",
                "config.ini"
            )
        else:
            return os.path.join(str(Path.home()), ".config", "migration-auditor", "config.ini")

    def _set_defaults(self):
        """
        Définit les valeurs de configuration par défaut

        Ces valeurs sont utilisées si aucun fichier de configuration n'est trouvé
        ou si certaines sections/clés sont manquantes.
        """
        # Configuration générale
        self.config.add_section('auditor')
        self.config.set('auditor', 'log_level', 'INFO')
        self.config.set('auditor', 'output_dir', '')  # vide = Bureau de l'utilisateur
        self.config.set('auditor', 'include_fonts', 'false')

        # Configuration du scan
        self.config.add_section('scan')
        self.config.set('scan', 'deep_scan_progress_start', '0.5')
        self.config.set('scan', 'deep_scan_progress_target', '0.75')
        self.config.set('scan', 'deep_scan_expected_seconds', '30')
        self.config.set('scan', 'progress_tick_seconds', '0.1')
        self.config.set('scan', 'brew_timeout', '10')
        self.config.set('scan', 'folder_size_max_files', '1000')
        self.config.set('scan', 'music_max_files', '5000')
        self.config.set('scan', 'photos_max_files', '10000')

        # Chemins système
        self.config.add_section('paths')
        self.config.set('paths', 'home_dir', '')  # vide = répertoire personnel courant
        self.config.set('paths', 'applications_dir', '/Applications')
        self.config.set('paths', 'printer_driver_dir', '/etc/cups/ppd')
        self.config.set('paths', 'system_fonts_dir', '/Library/Fonts')
        self.config.set('paths', 'network_fonts_dir', '/Network/Library/Fonts')
        self.config.set('paths', 'brew_candidates', '/opt/homebrew/bin/brew,/usr/local/bin/brew')

        # Configuration interface web
        self.config.add_section('web_interface')
        self.config.set('web_interface', 'enabled', 'true')
        self.config.set('web_interface', 'port', '18744')
        self.config.set('web_interface', 'host', '127.0.0.1')

        # Configuration logging
        self.config.add_section('logging')
        self.config.set('logging', 'log_file', self._get_default_log_path())
        self.config.set('logging', 'max_log_size', '10485760')  # 10MB
        self.config.set('logging', 'backup_count', '5')

    def _get_default_log_path(self) -> str:
        """
        Détermine le chemin par défaut des logs selon la plateforme

        Returns:
            str: Chemin vers le fichier de log
        """
        if sys.platform == "darwin":
            return os.path.join(str(Path.home()), "Library", "Logs", "MigrationAuditor", "auditor.log")
        else:
            return "/tmp/migration-auditor.log"

    def _load_config(self):
        """
        Charge la configuration depuis le fichier

        Si le fichier n'existe pas, utilise les valeurs par défaut.
        En cas d'erreur de lecture, continue avec les défauts.
        """
        try:
            if os.path.exists(self.config_file):
                self.config.read(self.config_file, encoding='utf-8')
                print(f"Configuration chargée depuis: {self.config_file}")

        except Exception as e:
            print(f"Erreur lors du chargement de la configuration: {e}")
            print("Utilisation des valeurs par défaut")

    def get(self, section: str, option: str, fallback: Any = None) -> str:
        """
        Récupère une valeur de configuration

        Args:
            section: Nom de la section
            option: Nom de l'option
            fallback: Valeur par défaut si non trouvée

        Returns:
            str: Valeur de configuration
        """
        return self.config.get(section, option, fallback=fallback)

    def getboolean(self, section: str, option: str, fallback: bool = False) -> bool:
        """Récupère une valeur booléenne de configuration"""
        try:
            return self.config.getboolean(section, option, fallback=fallback)
        except ValueError:
            return fallback

    def getint(self, section: str, option: str, fallback: int = 0) -> int:
        """Récupère une valeur entière de configuration"""
        try:
            return self.config.getint(section, option, fallback=fallback)
        except ValueError:
            return fallback

    def getfloat(self, section: str, option: str, fallback: float = 0.0) -> float:
        """Récupère une valeur décimale de configuration"""
        try:
            return self.config.getfloat(section, option, fallback=fallback)
        except ValueError:
            return fallback

    def set(self, section: str, option: str, value: Any):
        """
        Définit une valeur de configuration

        Args:
            section: Nom de la section
            option: Nom de l'option
            value: Nouvelle valeur
        """
        if not self.config.has_section(section):
            self.config.add_section(section)
        self.config.set(section, option, str(value))

    def save(self):
        """
        Sauvegarde la configuration dans le fichier

        Crée les dossiers parents si nécessaire.
        """
        try:
            config_dir = os.path.dirname(self.config_file)
            if config_dir and not os.path.exists(config_dir):
                os.makedirs(config_dir, exist_ok=True)

            with open(self.config_file, 'w', encoding='utf-8') as f:
                self.config.write(f)

            print(f"Configuration sauvegardée dans: {self.config_file}")

        except Exception as e:
            print(f"Erreur lors de la sauvegarde de la configuration: {e}")

    # --- Accès typés ---

    @property
    def home_dir(self) -> Path:
        """Répertoire personnel analysé (surcharge possible via [paths] home_dir)"""
        value = self.get('paths', 'home_dir', '')
        return Path(value).expanduser() if value else Path.home()

    @property
    def output_dir(self) -> Path:
        """Dossier de destination des archives et rapports PDF"""
        value = self.get('auditor', 'output_dir', '')
        return Path(value).expanduser() if value else self.home_dir / "Desktop"

    def get_path(self, option: str) -> Path:
        """
        Récupère un chemin de la section [paths]

        Args:
            option: Nom de l'option

        Returns:
            Path: Chemin configuré
        """
        return Path(self.get('paths', option, '')).expanduser()

    def get_brew_candidates(self) -> List[Path]:
        """Emplacements possibles de l'exécutable Homebrew, par ordre de priorité"""
        raw = self.get('paths', 'brew_candidates', '')
        return [Path(p.strip()) for p in raw.split(',') if p.strip()]

    def get_scan_config(self) -> Dict[str, Any]:
        """
        Récupère la configuration complète du scan

        Returns:
            dict: Configuration du scan
        """
        return {
            'deep_scan_progress_start': self.getfloat('scan', 'deep_scan_progress_start', 0.5),
            'deep_scan_progress_target': self.getfloat('scan', 'deep_scan_progress_target', 0.75),
            'deep_scan_expected_seconds': self.getfloat('scan', 'deep_scan_expected_seconds', 30.0),
            'progress_tick_seconds': self.getfloat('scan', 'progress_tick_seconds', 0.1),
            'brew_timeout': self.getint('scan', 'brew_timeout', 10),
            'folder_size_max_files': self.getint('scan', 'folder_size_max_files', 1000),
            'music_max_files': self.getint('scan', 'music_max_files', 5000),
            'photos_max_files': self.getint('scan', 'photos_max_files', 10000),
            'include_fonts': self.getboolean('auditor', 'include_fonts', False)
        }

    def get_web_config(self) -> Dict[str, Any]:
        """
        Récupère la configuration complète de l'interface web

        Returns:
            dict: Configuration interface web
        """
        return {
            'enabled': self.getboolean('web_interface', 'enabled', True),
            'port': self.getint('web_interface', 'port', 18744),
            'host': self.get('web_interface', 'host', '127.0.0.1')
        }

    def validate(self) -> bool:
        """
        Valide la configuration courante

        Returns:
            bool: True si la configuration est valide, False sinon
        """
        errors = []

        # Valider le niveau de log
        log_level = self.get('auditor', 'log_level')
        if log_level not in ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']:
            errors.append("Niveau de log invalide")

        # Valider les bornes de progression du scan approfondi
        scan_config = self.get_scan_config()
        start = scan_config['deep_scan_progress_start']
        target = scan_config['deep_scan_progress_target']
        if not (0.0 <= start < target <= 1.0):
            errors.append("Bornes de progression invalides (0 <= start < target <= 1)")

        if scan_config['brew_timeout'] <= 0:
            errors.append("Timeout Homebrew invalide (doit être positif)")

        # Valider le port web
        web_port = self.getint('web_interface', 'port')
        if not (1 <= web_port <= 65535):
            errors.append("Port interface web invalide (doit être entre 1 et 65535)")

        if errors:
            for error in errors:
                print(f"Erreur de configuration: {error}")
            return False

        return True


# Fonction utilitaire pour créer une configuration par défaut
def create_default_config(config_path: str) -> AuditorConfig:
    """
    Crée un fichier de configuration par défaut

    Args:
        config_path: Chemin où créer le fichier de configuration

    Returns:
        AuditorConfig: Instance de configuration créée
    """
    config = AuditorConfig(config_path)
    config.save()
    return config
