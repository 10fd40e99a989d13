"""
Migration Auditor - Inventaire de poste macOS avant migration

Ce module principal fournit un auditeur qui inventorie un Mac (matériel,
applications, périphériques, comptes, données utilisateur) et produit une
archive de migration (CSV, tableau de bord HTML, pilotes et polices capturés)
ainsi qu'un rapport PDF à la demande.

Version: 1.0.0
"""

__version__ = "1.0.0"
__author__ = "Migration Auditor Team"

# Imports principaux pour faciliter l'utilisation
from .core.collector import InventoryAggregator
from .core.config import AuditorConfig
from .core.logger import AuditorLogger

__all__ = ['InventoryAggregator', 'AuditorConfig', 'AuditorLogger']
