"""
Classe de base pour tous les collecteurs de l'auditeur de migration

Ce module définit l'interface commune que tous les collecteurs
doivent implémenter, ainsi que des utilitaires partagés.
"""

import os
import re
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..core.classifier import Classifier
from ..core.models import InventoryItem, ItemCategory


class BaseCollector(ABC):
    """
    Classe de base abstraite pour tous les collecteurs

    Un collecteur produit une liste d'InventoryItem pour un domaine.
    run() garantit qu'aucune exception ne remonte à l'appelant et qu'un
    domaine sans résultat produit exactement une ligne de remplacement.
    """

    # Ligne de remplacement du domaine (None si le collecteur produit toujours un élément)
    category: Optional[ItemCategory] = None
    placeholder_name: Optional[str] = None
    placeholder_detail: str = ""
    placeholder_vendor: str = "N/A"

    def __init__(self, config, logger, inquiry, classifier: Optional[Classifier] = None,
                 archiver=None, staging_dir: Optional[Path] = None):
        """
        Initialise le collecteur de base

        Args:
            config: Instance de AuditorConfig
            logger: Instance de AuditorLogger
            inquiry: Adaptateur d'interrogation système (SystemInquiry)
            classifier: Heuristiques de classification
            archiver: Instance de Archiver (collecteurs qui capturent des fichiers)
            staging_dir: Répertoire de préparation de l'archive
        """
        self.config = config
        self.logger = logger
        self.inquiry = inquiry
        self.classifier = classifier or Classifier()
        self.archiver = archiver
        self.staging_dir = Path(staging_dir) if staging_dir else None

        # Métadonnées du collecteur
        self.collector_name = self.__class__.__name__
        self.collection_start_time = None
        self.collection_errors = []
        self.last_collection_duration = 0.0

    @abstractmethod
    def collect(self) -> List[InventoryItem]:
        """
        Méthode principale de collecte - doit être implémentée par chaque collecteur

        Returns:
            list: Éléments découverts (éventuellement vide)
        """
        pass

    def placeholder(self) -> Optional[InventoryItem]:
        """Ligne "rien trouvé" du domaine"""
        if self.category is None or self.placeholder_name is None:
            return None
        return InventoryItem.placeholder(self.category, self.placeholder_name,
                                         self.placeholder_detail, self.placeholder_vendor)

    def run(self, method: Optional[Callable[[], List[InventoryItem]]] = None,
            placeholder: Optional[InventoryItem] = None) -> List[InventoryItem]:
        """
        Exécute une collecte de manière sécurisée

        Args:
            method: Méthode de collecte (collect() par défaut)
            placeholder: Ligne de remplacement (celle du collecteur par défaut)

        Returns:
            list: Éléments collectés, ou la ligne de remplacement si aucun
        """
        method = method or self.collect
        self._start_collection()

        items = self._safe_execute(
            lambda: list(method()),
            f"Erreur collecte {self.collector_name}",
            default_value=[]
        )

        if not items:
            fallback = placeholder or self.placeholder()
            if fallback is not None:
                items = [fallback]

        self.last_collection_duration = self._end_collection()
        return items

    def _start_collection(self):
        """
        Démarre une session de collecte

        Initialise les métriques et logs pour le suivi de performance.
        """
        self.collection_start_time = time.time()
        self.collection_errors = []
        self.logger.debug(f"Début collecte {self.collector_name}")

    def _end_collection(self) -> float:
        """
        Termine une session de collecte

        Returns:
            float: Durée de collecte en secondes
        """
        if self.collection_start_time:
            duration = time.time() - self.collection_start_time
            self.logger.debug(f"Collecte {self.collector_name} terminée en {duration:.2f}s")

            if self.collection_errors:
                self.logger.warning(f"Collecte {self.collector_name} avec {len(self.collection_errors)} erreur(s)")

            return duration
        return 0.0

    def _safe_execute(self, func, error_message: str = "Erreur lors de l'exécution", default_value=None):
        """
        Exécute une fonction de manière sécurisée avec gestion d'erreur

        Args:
            func: Fonction à exécuter
            error_message: Message d'erreur personnalisé
            default_value: Valeur par défaut en cas d'erreur

        Returns:
            Résultat de la fonction ou default_value
        """
        try:
            return func()
        except Exception as e:
            error_details = f"{error_message}: {str(e)}"
            self.collection_errors.append(error_details)
            self.logger.warning(error_details)
            return default_value

    # --- Utilitaires ---

    @property
    def home_dir(self) -> Path:
        return self.config.home_dir

    def _format_bytes(self, bytes_value: int) -> str:
        """
        Formate une valeur en bytes en format lisible

        Args:
            bytes_value: Valeur en bytes

        Returns:
            str: Valeur formatée (ex: "1.5 GB")
        """
        if bytes_value is None:
            return "N/A"

        try:
            bytes_value = int(bytes_value)
        except (ValueError, TypeError):
            return "N/A"

        # Unités
        units = ['B', 'KB', 'MB', 'GB', 'TB']
        size = float(bytes_value)
        unit_index = 0

        while size >= 1024 and unit_index < len(units) - 1:
            size /= 1024
            unit_index += 1

        return f"{size:.1f} {units[unit_index]}"

    def _clean_string(self, value: Any) -> str:
        """
        Nettoie une chaîne de caractères

        Args:
            value: Chaîne à nettoyer

        Returns:
            str: Chaîne nettoyée
        """
        if not value:
            return ""

        value = str(value).strip()

        # Supprimer les caractères de contrôle
        value = ''.join(char for char in value if char.isprintable())

        # Supprimer les espaces multiples
        return re.sub(r'\s+', ' ', value)

    def _list_dir(self, path: Path) -> List[Path]:
        """
        Liste le contenu d'un dossier, trié par nom

        Returns:
            list: Entrées du dossier, vide si absent ou illisible
        """
        try:
            return sorted(Path(path).iterdir(), key=lambda entry: entry.name)
        except OSError as e:
            self.logger.debug(f"Dossier illisible {path}: {e}")
            return []

    def _folder_size(self, path: Path, max_files: int,
                     extensions: Optional[Tuple[str, ...]] = None) -> Tuple[int, int]:
        """
        Calcule la taille d'un dossier en s'arrêtant après max_files fichiers

        Args:
            path: Dossier à parcourir
            max_files: Nombre maximal de fichiers comptés
            extensions: Extensions retenues (sans point, minuscules), toutes si None

        Returns:
            tuple: (taille cumulée en octets, nombre de fichiers comptés)
        """
        total_size = 0
        file_count = 0

        for root, dirs, files in os.walk(path):
            dirs[:] = [d for d in dirs if not d.startswith('.')]
            for name in files:
                if name.startswith('.'):
                    continue
                if extensions and name.rsplit('.', 1)[-1].lower() not in extensions:
                    continue
                try:
                    total_size += os.path.getsize(os.path.join(root, name))
                except OSError:
                    continue
                file_count += 1
                if file_count >= max_files:
                    return total_size, file_count

        return total_size, file_count

    def get_collection_stats(self) -> Dict[str, Any]:
        """
        Retourne les statistiques de la dernière collecte

        Returns:
            dict: Statistiques du collecteur
        """
        return {
            'collector_name': self.collector_name,
            'collection_duration': self.last_collection_duration,
            'errors_count': len(self.collection_errors),
            'errors': self.collection_errors.copy()
        }
