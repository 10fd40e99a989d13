"""
Collecteur du compte iCloud et du mode de gestion de la machine

Détection au mieux :
- Adresse du compte via les préférences MobileMeAccounts, puis via les
  profils de configuration
- Inscription Apple Business Manager (DEP) via "profiles status" et des
  fichiers témoins
- Présence d'un MDM via "profiles list"

Quand les signaux sont contradictoires, le résultat est "inconnu" plutôt
qu'une réponse binaire.
"""

import re
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple

from .base import BaseCollector
from ..core.models import InventoryItem, ItemCategory


EMAIL_PATTERN = re.compile(r"[A-Z0-9a-z._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,64}")

APPLE_ID_DOMAINS = ("icloud.com", "me.com", "mac.com")

PERSONAL_EMAIL_DOMAINS = (
    "gmail.com", "googlemail.com",
    "hotmail.com", "outlook.com", "live.com", "msn.com",
    "yahoo.com", "ymail.com",
    "aol.com",
    "protonmail.com", "proton.me",
)

ABM_INDICATOR_FILES = (
    "/Library/Application Support/com.apple.TCC/MDMOverrides.plist",
    "/var/db/ConfigurationProfiles/Settings/.cloudConfigHasActivationRecord",
    "/var/db/ConfigurationProfiles/Settings/.cloudConfigRecordFound",
)

MDM_PROFILE_MARKERS = ("com.apple.mdm", "devicemanagement")
MDM_VENDOR_MARKERS = ("jamf", "intune", "workspace", "kandji", "mosyle")


class AccountManagement(Enum):
    """Mode de gestion du compte iCloud"""
    APPLE_BUSINESS_MANAGER = ("Apple Business Manager", "Business/MDM")
    MDM_MANAGED = ("MDM Managed", "Business/MDM")
    PERSONAL = ("Personal iCloud", "Personal")
    UNKNOWN = ("Management status unknown", "Unknown")

    @property
    def description(self) -> str:
        return self.value[0]

    @property
    def vendor(self) -> str:
        return self.value[1]


def extract_email(text: str) -> Optional[str]:
    """Première adresse e-mail trouvée dans un texte"""
    match = EMAIL_PATTERN.search(text or "")
    return match.group(0) if match else None


def _domain_matches(email: str, domains: Tuple[str, ...]) -> bool:
    domain = email.lower().rsplit("@", 1)[-1]
    return any(domain == d or domain.endswith("." + d) for d in domains)


def classify_account(email: str, is_abm: bool, has_mdm: bool) -> AccountManagement:
    """
    Détermine le mode de gestion d'un compte

    Règles, dans l'ordre :
    1. Fournisseur de messagerie grand public (hors Apple) : personnel
    2. Domaine Apple ID : ABM si inscription ABM ; inconnu si seul un MDM
       est présent ; personnel sinon
    3. Domaine personnalisé : géré par MDM si un MDM ou ABM est détecté ;
       inconnu sinon

    Args:
        email: Adresse du compte
        is_abm: Inscription Apple Business Manager détectée
        has_mdm: Profil MDM détecté

    Returns:
        AccountManagement: Mode de gestion
    """
    if _domain_matches(email, PERSONAL_EMAIL_DOMAINS):
        return AccountManagement.PERSONAL

    if _domain_matches(email, APPLE_ID_DOMAINS):
        if is_abm:
            return AccountManagement.APPLE_BUSINESS_MANAGER
        if has_mdm:
            return AccountManagement.UNKNOWN
        return AccountManagement.PERSONAL

    if is_abm or has_mdm:
        return AccountManagement.MDM_MANAGED
    return AccountManagement.UNKNOWN


class AccountCollector(BaseCollector):
    """
    Collecteur du compte iCloud

    Produit toujours exactement un élément "iCloud Account".
    """

    category = ItemCategory.SYSTEM_SPEC
    placeholder_name = "iCloud Account"
    placeholder_detail = "Not signed in"

    abm_indicator_files = ABM_INDICATOR_FILES

    def collect(self) -> List[InventoryItem]:
        email = self._find_account_email()

        if email:
            is_abm = self._safe_execute(self._check_apple_business_manager,
                                        "Erreur détection Apple Business Manager", False)
            has_mdm = self._safe_execute(self._check_mdm_profile,
                                         "Erreur détection MDM", False)
            management = classify_account(email, is_abm, has_mdm)
            self.logger.info(f"Compte iCloud détecté: {management.name} (ABM={is_abm}, MDM={has_mdm})")
            return [InventoryItem(self.category, "iCloud Account",
                                  f"{management.description} - {email}",
                                  vendor=management.vendor)]

        if self._has_icloud_drive():
            return [InventoryItem(self.category, "iCloud Account",
                                  "Signed in (email not detected)", vendor="iCloud")]

        return [self.placeholder()]

    def _find_account_email(self) -> Optional[str]:
        accounts = self.inquiry.icloud_accounts()
        for line in accounts.splitlines():
            if "AccountID" in line or "@" in line:
                email = extract_email(line)
                if email:
                    return email

        return extract_email(self.inquiry.configuration_profiles())

    def _has_icloud_drive(self) -> bool:
        return (self.home_dir / "Library" / "Mobile Documents" / "com~apple~CloudDocs").is_dir()

    def _check_apple_business_manager(self) -> bool:
        """
        Inscription ABM / DEP

        La sortie de "profiles status -type enrollment" contient toujours les
        libellés ; seule une réponse "Yes" est un signal.
        """
        status = self.inquiry.enrollment_status()
        for line in status.splitlines():
            key, _, value = line.partition(":")
            if "Enrolled via DEP" in key and value.strip().lower().startswith("yes"):
                return True

        return any(Path(path).exists() for path in self.abm_indicator_files)

    def _check_mdm_profile(self) -> bool:
        status = self.inquiry.enrollment_status()
        for line in status.splitlines():
            key, _, value = line.partition(":")
            if "MDM enrollment" in key and value.strip().lower().startswith("yes"):
                return True

        profiles = self.inquiry.profiles_list()
        for line in profiles.splitlines():
            if any(marker in line for marker in MDM_PROFILE_MARKERS):
                return True
            if "profileIdentifier" in line and "mdm" in line:
                return True

        if "profileIdentifier" in profiles:
            lowered = profiles.lower()
            return any(marker in lowered for marker in MDM_VENDOR_MARKERS)

        return False
