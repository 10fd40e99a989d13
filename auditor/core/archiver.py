"""
Module d'archivage pour l'auditeur de migration

Ce module gère :
- La copie des fichiers capturés (pilotes d'imprimante, polices) vers le
  répertoire de préparation
- La compression du répertoire de préparation en archive zip
"""

import os
import shutil
import zipfile
from pathlib import Path
from typing import Iterable, List, Union


class ArchiveError(Exception):
    """Échec de création de l'archive finale"""


class Archiver:
    """
    Gestionnaire des fichiers de l'archive de migration

    La copie est au mieux : un fichier illisible est ignoré et journalisé.
    La compression échoue d'un bloc en levant ArchiveError.
    """

    def __init__(self, logger):
        """
        Args:
            logger: Instance de AuditorLogger
        """
        self.logger = logger

    def copy_files(self, sources: Iterable[Union[str, Path]], destination: Union[str, Path]) -> List[Path]:
        """
        Copie des fichiers vers un dossier de destination

        Args:
            sources: Fichiers à copier
            destination: Dossier cible (créé si besoin)

        Returns:
            list: Chemins des copies réussies
        """
        destination = Path(destination)
        destination.mkdir(parents=True, exist_ok=True)

        copied = []
        for source in sources:
            source = Path(source)
            target = destination / source.name
            try:
                shutil.copy2(source, target)
                copied.append(target)
            except OSError as e:
                self.logger.warning(f"Copie impossible de {source}: {e}")

        self.logger.debug(f"{len(copied)} fichier(s) copié(s) vers {destination}")
        return copied

    def copy_directory_contents(self, source_dir: Union[str, Path], destination: Union[str, Path]) -> List[Path]:
        """
        Copie les fichiers (non récursif) d'un dossier

        Un dossier source absent ou illisible donne une liste vide.
        """
        source_dir = Path(source_dir)
        try:
            entries = [entry for entry in source_dir.iterdir() if entry.is_file()]
        except OSError as e:
            self.logger.debug(f"Lecture impossible de {source_dir}: {e}")
            Path(destination).mkdir(parents=True, exist_ok=True)
            return []
        return self.copy_files(sorted(entries), destination)

    def archive(self, staging_dir: Union[str, Path], archive_path: Union[str, Path]) -> Path:
        """
        Compresse le contenu du répertoire de préparation

        Les chemins de l'archive sont relatifs au répertoire de préparation.
        Les dossiers (même vides) sont conservés comme entrées de répertoire.

        Args:
            staging_dir: Répertoire de préparation
            archive_path: Chemin de l'archive à créer

        Returns:
            Path: Chemin de l'archive créée

        Raises:
            ArchiveError: Si l'archive ne peut pas être écrite
        """
        staging_dir = Path(staging_dir)
        archive_path = Path(archive_path)

        if not staging_dir.is_dir():
            raise ArchiveError(f"Répertoire de préparation introuvable: {staging_dir}")

        try:
            archive_path.parent.mkdir(parents=True, exist_ok=True)
            with zipfile.ZipFile(archive_path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
                for root, dirs, files in os.walk(staging_dir):
                    dirs.sort()
                    root_path = Path(root)
                    relative_root = root_path.relative_to(staging_dir)

                    if relative_root != Path("."):
                        zf.write(root_path, arcname=f"{relative_root.as_posix()}/")

                    for name in sorted(files):
                        file_path = root_path / name
                        zf.write(file_path, arcname=(relative_root / name).as_posix())

        except (OSError, zipfile.BadZipFile) as e:
            if archive_path.is_file():
                archive_path.unlink()
            raise ArchiveError(f"Impossible de créer l'archive {archive_path}: {e}") from e

        self.logger.info(f"Archive créée: {archive_path}")
        return archive_path
