"""
Heuristiques de classification partagées par les collecteurs

Ce module regroupe trois fonctions pures :
- Attribution d'un éditeur à partir de la description, du nom et du chemin
- Distinction application utilisateur / composant interne
- Statut de compatibilité matérielle (macOS Tahoe / Apple Intelligence)

Les tables utilisées sont immuables et peuvent être substituées
(par version de macOS ou pour les tests).
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import FrozenSet, Mapping, Optional, Tuple


@dataclass(frozen=True)
class VendorRule:
    """Règle d'attribution : mots-clés cherchés dans la description et le nom"""
    vendor: str
    description_keywords: Tuple[str, ...] = ()
    name_keywords: Tuple[str, ...] = ()

    def matches(self, description: str, name: str) -> bool:
        return (any(k in description for k in self.description_keywords) or
                any(k in name for k in self.name_keywords))


class ComplianceStatus(Enum):
    """Éligibilité de la machine à la prochaine version de macOS"""
    FULLY_SUPPORTED = "Fully supported (macOS Tahoe + Apple Intelligence)"
    OS_ONLY = "macOS Tahoe supported, no Apple Intelligence"
    UNSUPPORTED = "Not supported by macOS Tahoe"


@dataclass(frozen=True)
class ClassifierTables:
    """Tables de classification (valeurs en minuscules sauf mention contraire)"""

    # Éditeurs tiers, vérifiés dans cet ordre avant Apple
    vendor_rules: Tuple[VendorRule, ...] = (
        VendorRule("Microsoft", ("microsoft",), ("microsoft",)),
        VendorRule("Adobe", ("adobe",), ("adobe",)),
        VendorRule("Google", ("google",), ("google",)),
        VendorRule("Zoom", ("zoom",)),
        VendorRule("Cisco", ("cisco",), ("webex",)),
    )
    platform_vendor: str = "Apple"
    platform_path_prefixes: Tuple[str, ...] = ("/system/",)
    platform_path_fragments: Tuple[str, ...] = ("/core services/",)
    platform_app_names: FrozenSet[str] = frozenset({
        "safari", "numbers", "pages", "keynote", "xcode", "imovie", "garageband",
        "photos", "podcasts", "music", "tv", "mail", "finder", "preview", "textedit",
    })
    platform_description_keywords: Tuple[str, ...] = ("apple", "mac app store")
    fallback_vendor: str = "Other Developers"

    # Dossiers d'applications (sensibles à la casse)
    app_folder_prefixes: Tuple[str, ...] = ("/Applications", "/System/Applications")
    user_home_prefix: str = "/Users/"
    user_app_fragment: str = "/Applications/"
    excluded_prefixes: Tuple[str, ...] = ("/System/Library", "/Library")

    # Compatibilité : (majeur, mineur) minimum par famille de modèles Intel
    apple_silicon_markers: Tuple[str, ...] = ("apple m", "apple silicon")
    compliance_cutoffs: Mapping[str, Tuple[int, int]] = field(default_factory=lambda: {
        "MacBookPro": (15, 3),
        "MacBookAir": (10, 1),
        "iMac": (20, 1),
        "Macmini": (9, 1),
        "MacPro": (7, 1),
        "iMacPro": (2, 1),
    })

    def __post_init__(self):
        # Copie en lecture seule, une table passée en argument reste isolée
        object.__setattr__(self, "compliance_cutoffs", MappingProxyType(dict(self.compliance_cutoffs)))


DEFAULT_TABLES = ClassifierTables()


def parse_model_identifier(model: str) -> Optional[Tuple[str, int, int]]:
    """
    Décompose un identifiant de modèle ("MacBookPro15,2")

    Parcourt les caractères non numériques de tête (famille), puis les chiffres
    (majeur), un séparateur, puis les chiffres de fin (mineur).

    Args:
        model: Identifiant de modèle

    Returns:
        tuple: (famille, majeur, mineur) ou None si non décomposable
    """
    text = (model or "").strip()
    i = 0
    while i < len(text) and not text[i].isdigit():
        i += 1
    family = text[:i]

    j = i
    while j < len(text) and text[j].isdigit():
        j += 1
    major = text[i:j]

    # Séparateur (virgule en pratique)
    k = j + 1 if j < len(text) and not text[j].isdigit() else j
    m = k
    while m < len(text) and text[m].isdigit():
        m += 1
    minor = text[k:m]

    if not family or not major or not minor:
        return None
    return family, int(major), int(minor)


class Classifier:
    """
    Heuristiques de classification

    Chaque méthode est une fonction pure des tables et de ses arguments.
    """

    def __init__(self, tables: ClassifierTables = DEFAULT_TABLES):
        self.tables = tables

    def detect_vendor(self, description: Optional[str], name: str, path: Optional[str]) -> str:
        """
        Attribue un éditeur à une application

        Les éditeurs tiers sont vérifiés en premier, dans l'ordre des tables,
        puis Apple (chemin système, nom connu, description), puis le repli.

        Args:
            description: Texte libre (champ "info" / "obtained_from" du profiler)
            name: Nom de l'application
            path: Chemin du bundle

        Returns:
            str: Nom de l'éditeur
        """
        info = (description or "").lower()
        lowered_name = (name or "").lower()
        lowered_path = (path or "").lower()
        tables = self.tables

        for rule in tables.vendor_rules:
            if rule.matches(info, lowered_name):
                return rule.vendor

        if lowered_path.startswith(tables.platform_path_prefixes):
            return tables.platform_vendor
        if any(fragment in lowered_path for fragment in tables.platform_path_fragments):
            return tables.platform_vendor
        if lowered_name in tables.platform_app_names:
            return tables.platform_vendor
        if any(keyword in info for keyword in tables.platform_description_keywords):
            return tables.platform_vendor

        return tables.fallback_vendor

    def is_user_facing(self, path: Optional[str]) -> bool:
        """
        Indique si une application est destinée à l'utilisateur

        Trois conditions : dossier d'applications reconnu, au plus un bundle
        .app dans le chemin, hors des bibliothèques système.

        Args:
            path: Chemin du bundle

        Returns:
            bool: True pour une application utilisateur
        """
        if not path:
            return False
        tables = self.tables

        in_app_folder = (
            path.startswith(tables.app_folder_prefixes) or
            (path.startswith(tables.user_home_prefix) and tables.user_app_fragment in path)
        )

        bundle_depth = sum(1 for part in path.split("/") if part.endswith(".app"))
        is_nested = bundle_depth > 1

        is_system_library = path.startswith(tables.excluded_prefixes)

        return in_app_folder and not is_nested and not is_system_library

    def is_apple_silicon(self, chip: Optional[str]) -> bool:
        lowered = (chip or "").lower()
        return any(marker in lowered for marker in self.tables.apple_silicon_markers)

    def compliance_status(self, chip: Optional[str], model_identifier: Optional[str]) -> ComplianceStatus:
        """
        Détermine le statut de compatibilité matérielle

        Args:
            chip: Nom du processeur ("Apple M2", "Quad-Core Intel Core i5", ...)
            model_identifier: Identifiant de modèle ("MacBookPro15,2")

        Returns:
            ComplianceStatus: Statut de compatibilité
        """
        if self.is_apple_silicon(chip):
            return ComplianceStatus.FULLY_SUPPORTED

        parsed = parse_model_identifier(model_identifier or "")
        if parsed is None:
            return ComplianceStatus.UNSUPPORTED

        family, major, minor = parsed
        cutoff = self.tables.compliance_cutoffs.get(family)
        if cutoff is None:
            return ComplianceStatus.UNSUPPORTED

        if (major, minor) < cutoff:
            return ComplianceStatus.UNSUPPORTED
        return ComplianceStatus.OS_ONLY
