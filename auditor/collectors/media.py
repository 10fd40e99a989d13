"""
Collecteurs des bibliothèques multimédia

- Musique : bibliothèque Apple Music / iTunes et cache Spotify
- Photos : bibliothèque Apple Photos (nombre de photos et vidéos, taille)

Les parcours de fichiers sont plafonnés pour ne pas bloquer le scan
sur de très grosses bibliothèques.
"""

import os
from pathlib import Path
from typing import List, Tuple

from .base import BaseCollector
from ..core.models import InventoryItem, ItemCategory


MUSIC_LIBRARY_PATHS = (
    "Music/Music/Media.localized/Music",
    "Music/iTunes/iTunes Music",
    "Music/Music/Music",
    "Music",
)
MUSIC_EXTENSIONS = ("mp3", "m4a", "aac", "flac", "wav", "aiff", "alac", "ogg")
SPOTIFY_CACHE_PATH = "Library/Application Support/Spotify/Users"

PHOTOS_LIBRARY_PATHS = (
    "Pictures/Photos Library.photoslibrary",
    "Pictures/Photos.photoslibrary",
)
PHOTO_EXTENSIONS = ("jpg", "jpeg", "png", "heic", "heif", "gif", "tiff", "raw", "cr2", "nef", "dng")
VIDEO_EXTENSIONS = ("mov", "mp4", "m4v", "avi", "mkv")
PHOTOS_COUNT_MAX_FILES = 5000


class MusicLibraryCollector(BaseCollector):
    """Collecteur de la bibliothèque musicale locale"""

    category = ItemCategory.MUSIC_LIBRARY
    placeholder_name = "No Music Library"
    placeholder_detail = "No local music collection detected"

    def collect(self) -> List[InventoryItem]:
        items = []
        max_files = self.config.getint('scan', 'music_max_files', 5000)

        # Premier emplacement contenant au moins une piste
        for relative in MUSIC_LIBRARY_PATHS:
            path = self.home_dir / relative
            if not path.is_dir():
                continue
            size, tracks = self._folder_size(path, max_files, MUSIC_EXTENSIONS)
            if tracks > 0:
                items.append(InventoryItem(self.category, "Apple Music Library",
                                           f"{tracks} tracks - {self._format_bytes(size)}",
                                           vendor="Apple", source_path=str(path)))
                break

        spotify = self.home_dir / SPOTIFY_CACHE_PATH
        if spotify.is_dir():
            size, _ = self._folder_size(spotify, self.config.getint('scan', 'folder_size_max_files', 1000))
            if size > 0:
                items.append(InventoryItem(self.category, "Spotify Cache",
                                           f"Local data - {self._format_bytes(size)}",
                                           vendor="Spotify", source_path=str(spotify)))

        return items


class PhotosLibraryCollector(BaseCollector):
    """Collecteur de la bibliothèque Apple Photos"""

    category = ItemCategory.PHOTOS_LIBRARY
    placeholder_name = "No Photos Library"
    placeholder_detail = "No Apple Photos library detected"

    def collect(self) -> List[InventoryItem]:
        max_files = self.config.getint('scan', 'photos_max_files', 10000)

        for relative in PHOTOS_LIBRARY_PATHS:
            path = self.home_dir / relative
            if not path.exists():
                continue

            size, _ = self._folder_size(path, max_files)
            if size <= 0:
                continue

            photos, videos = self._count_media(path / "originals")
            detail = self._format_bytes(size)
            if photos or videos:
                detail = f"{photos} photos, {videos} videos - {detail}"

            return [InventoryItem(self.category, "Apple Photos Library", detail,
                                  vendor="Apple", source_path=str(path))]

        return []

    def _count_media(self, originals: Path) -> Tuple[int, int]:
        """Compte photos et vidéos dans le dossier des originaux (plafonné)"""
        photos = videos = seen = 0
        for _, _, files in os.walk(originals):
            for name in files:
                seen += 1
                if seen > PHOTOS_COUNT_MAX_FILES:
                    return photos, videos
                extension = name.rsplit('.', 1)[-1].lower() if '.' in name else ""
                if extension in PHOTO_EXTENSIONS:
                    photos += 1
                elif extension in VIDEO_EXTENSIONS:
                    videos += 1
        return photos, videos
