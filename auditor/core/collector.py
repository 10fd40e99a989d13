"""
Module collecteur principal pour l'auditeur de migration

Ce module orchestre le scan complet :
- Exécution séquentielle des collecteurs dans un ordre fixe
- Assemblage de l'inventaire (ajout en fin uniquement)
- Publication de la progression sur une file d'événements
- Finalisation : rapports CSV/HTML, archive zip, nettoyage
"""

import queue
import shutil
import tempfile
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from .archiver import Archiver, ArchiveError
from .classifier import Classifier
from .models import InventoryItem, sanitize_name
from .progress import ProgressEvent, SyntheticProgress
from ..collectors.account import AccountCollector
from ..collectors.browsers import BrowserCollector
from ..collectors.cloud_storage import CloudStorageCollector
from ..collectors.email import EmailAccountCollector
from ..collectors.fonts import CAPTURED_FONTS_DIR, FontCollector
from ..collectors.hardware import HardwareCollector
from ..collectors.homebrew import HomebrewCollector
from ..collectors.media import MusicLibraryCollector, PhotosLibraryCollector
from ..collectors.network import NetworkVolumeCollector
from ..collectors.peripherals import PeripheralCollector
from ..collectors.printers import PRINTER_DRIVERS_DIR, PrinterCollector
from ..collectors.software import ApplicationsFolderCollector, DeepApplicationCollector
from ..reporting.csv_report import write_csv
from ..reporting.html_report import write_html


class ScanState(Enum):
    """États du scan"""
    IDLE = "idle"
    SCANNING = "scanning"
    FINALIZING = "finalizing"
    COMPLETE = "complete"
    FAILED = "failed"


class ScanAlreadyRunningError(RuntimeError):
    """Un scan est déjà en cours"""


@dataclass(frozen=True)
class ScanStep:
    """
    Étape du pipeline

    Attributes:
        key: Identifiant de l'étape
        status: Message affiché pendant l'étape
        synthetic: Étape longue animée par une progression synthétique
    """
    key: str
    status: str
    synthetic: bool = False


PIPELINE: Tuple[ScanStep, ...] = (
    ScanStep("storage", "Analysing Storage & RAM..."),
    ScanStep("memory", "Analysing Storage & RAM..."),
    ScanStep("identity", "Checking hardware identity..."),
    ScanStep("account", "Checking iCloud account..."),
    ScanStep("browsers", "Detecting browsers..."),
    ScanStep("email", "Detecting email accounts..."),
    ScanStep("cloud_storage", "Detecting cloud storage..."),
    ScanStep("fonts", "Scanning fonts..."),
    ScanStep("applications_folder", "Scanning Applications..."),
    ScanStep("network_volumes", "Checking Network Drives..."),
    ScanStep("deep_scan", "Deep System Analysis...", synthetic=True),
    ScanStep("peripherals", "Scanning USB Devices..."),
    ScanStep("printers", "Capturing Printer Drivers..."),
    ScanStep("homebrew", "Checking Homebrew packages..."),
    ScanStep("music", "Measuring music library..."),
    ScanStep("photos", "Measuring photos library..."),
)

STEP_KEYS = tuple(step.key for step in PIPELINE)

# Part de la progression réservée à la finalisation
FINALIZE_START = 0.95


@dataclass(frozen=True)
class ScanRequest:
    """
    Paramètres d'un scan

    Attributes:
        display_name: Nom de l'utilisateur audité (noms de fichiers, rapports)
        include_fonts: Copier les polices trouvées dans l'archive
        output_dir: Dossier de l'archive (configuration si None)
        steps: Clés des étapes à exécuter (toutes si None), l'ordre du pipeline est conservé
    """
    display_name: str
    include_fonts: bool = False
    output_dir: Optional[Path] = None
    steps: Optional[Sequence[str]] = None


@dataclass
class ScanResult:
    """Résultat d'un scan"""
    state: ScanState
    items: Tuple[InventoryItem, ...] = ()
    archive_path: Optional[Path] = None
    error: Optional[str] = None
    started_at: Optional[datetime] = None
    duration: float = 0.0
    collector_stats: List[Dict[str, Any]] = field(default_factory=list)


def plan_progress(steps: Sequence[ScanStep], deep_start: float,
                  deep_target: float) -> List[Tuple[ScanStep, float, float]]:
    """
    Calcule les bornes de progression de chaque étape

    Les étapes précédant l'étape synthétique se partagent [0, deep_start],
    celles qui la suivent [deep_target, FINALIZE_START]. Sans étape
    synthétique, toutes se partagent [0, FINALIZE_START].

    Returns:
        list: (étape, début, fin) avec des bornes croissantes
    """
    synthetic_index = next((i for i, step in enumerate(steps) if step.synthetic), None)

    def spread(chunk, low, high):
        if not chunk:
            return []
        width = (high - low) / len(chunk)
        return [(step, low + i * width, low + (i + 1) * width) for i, step in enumerate(chunk)]

    if synthetic_index is None:
        return spread(list(steps), 0.0, FINALIZE_START)

    before = list(steps[:synthetic_index])
    after = list(steps[synthetic_index + 1:])
    return (spread(before, 0.0, deep_start) +
            [(steps[synthetic_index], deep_start, deep_target)] +
            spread(after, deep_target, FINALIZE_START))


class InventoryAggregator:
    """
    Agrégateur principal qui orchestre tout le scan d'inventaire

    Cette classe exécute les collecteurs dans l'ordre du pipeline, assemble
    l'inventaire et publie la progression sur self.events (queue.Queue).
    Un seul scan peut être actif à la fois.
    """

    def __init__(self, config, logger, inquiry=None, classifier: Optional[Classifier] = None,
                 archiver: Optional[Archiver] = None):
        """
        Initialise l'agrégateur

        Args:
            config: Instance de AuditorConfig
            logger: Instance de AuditorLogger
            inquiry: Adaptateur d'interrogation système (SystemInquiry par défaut)
            classifier: Heuristiques de classification
            archiver: Gestionnaire d'archive
        """
        self.config = config
        self.logger = logger.get_logger()

        if inquiry is None:
            from ..collectors.platform.macos import SystemInquiry
            inquiry = SystemInquiry(self.logger)
        self.inquiry = inquiry
        self.classifier = classifier or Classifier()
        self.archiver = archiver or Archiver(self.logger)

        self.events: "queue.Queue[ProgressEvent]" = queue.Queue()

        self._lock = threading.Lock()
        self._state = ScanState.IDLE
        self._items: List[InventoryItem] = []
        self._fraction = 0.0
        self._status = "Ready"
        self._worker: Optional[threading.Thread] = None
        self.last_result: Optional[ScanResult] = None

        self.logger.info("InventoryAggregator initialisé")

    # --- État ---

    @property
    def state(self) -> ScanState:
        with self._lock:
            return self._state

    @property
    def is_scanning(self) -> bool:
        return self.state in (ScanState.SCANNING, ScanState.FINALIZING)

    @property
    def items(self) -> Tuple[InventoryItem, ...]:
        with self._lock:
            return tuple(self._items)

    def get_status(self) -> Dict[str, Any]:
        """
        Retourne le statut courant du scan

        Returns:
            dict: État, progression, message et nombre d'éléments
        """
        with self._lock:
            status = {
                'state': self._state.value,
                'progress': round(self._fraction, 4),
                'status': self._status,
                'item_count': len(self._items),
                'archive_path': None,
                'error': None
            }
        if self.last_result:
            status['archive_path'] = str(self.last_result.archive_path) if self.last_result.archive_path else None
            status['error'] = self.last_result.error
        return status

    # --- Points d'entrée ---

    def scan(self, request: ScanRequest) -> ScanResult:
        """
        Lance un scan complet dans le thread courant

        Args:
            request: Paramètres du scan

        Returns:
            ScanResult: Résultat du scan

        Raises:
            ScanAlreadyRunningError: Si un scan est déjà en cours
        """
        self._begin()
        return self._run(request)

    def start_background(self, request: ScanRequest) -> threading.Thread:
        """
        Lance un scan dans un thread de travail

        Raises:
            ScanAlreadyRunningError: Si un scan est déjà en cours
        """
        self._begin()
        self._worker = threading.Thread(
            target=self._run,
            args=(request,),
            name="InventoryScan",
            daemon=True
        )
        self._worker.start()
        return self._worker

    def wait(self, timeout: Optional[float] = None) -> Optional[ScanResult]:
        """Attend la fin du scan en arrière-plan"""
        if self._worker:
            self._worker.join(timeout)
        return self.last_result

    def _begin(self):
        with self._lock:
            if self._state in (ScanState.SCANNING, ScanState.FINALIZING):
                raise ScanAlreadyRunningError("Un scan est déjà en cours")
            self._state = ScanState.SCANNING
            self._items = []
            self._fraction = 0.0
            self._status = "Initialising scan..."
        self.last_result = None

    # --- Pipeline ---

    def _selected_steps(self, request: ScanRequest) -> List[ScanStep]:
        if request.steps is None:
            return list(PIPELINE)

        unknown = set(request.steps) - set(STEP_KEYS)
        if unknown:
            self.logger.warning(f"Étapes inconnues ignorées: {', '.join(sorted(unknown))}")
        return [step for step in PIPELINE if step.key in request.steps]

    def _run(self, request: ScanRequest) -> ScanResult:
        start_time = time.time()
        started_at = datetime.now()
        self.logger.info(f"=== Début du scan d'inventaire ({request.display_name}) ===")

        scan_config = self.config.get_scan_config()
        staging_dir = Path(tempfile.mkdtemp(prefix="Migration_Audit_"))
        result = ScanResult(state=ScanState.FAILED, started_at=started_at)

        try:
            (staging_dir / PRINTER_DRIVERS_DIR).mkdir(parents=True, exist_ok=True)
            collectors = self._build_collectors(request, staging_dir)
            steps = self._selected_steps(request)

            plan = plan_progress(steps, scan_config['deep_scan_progress_start'],
                                 scan_config['deep_scan_progress_target'])

            for step, step_start, step_end in plan:
                self._run_step(step, step_start, step_end, collectors, scan_config)

            result.collector_stats = [c.get_collection_stats() for c in collectors['_all']]
            result = self._finalize(request, staging_dir, result)

        except Exception as e:
            self.logger.exception("Erreur lors du scan d'inventaire")
            result.state = ScanState.FAILED
            result.error = str(e)

        finally:
            shutil.rmtree(staging_dir, ignore_errors=True)
            result.items = self.items
            result.duration = round(time.time() - start_time, 2)

            with self._lock:
                self._state = result.state
                self._fraction = 1.0
                self._status = "Complete" if result.state == ScanState.COMPLETE else "Failed"
            self.last_result = result
            self._publish(result.state.value, 1.0, self._status)

            self.logger.info(f"Scan terminé en {result.duration:.2f} secondes "
                             f"({len(result.items)} éléments, état: {result.state.value})")

        return result

    def _build_collectors(self, request: ScanRequest, staging_dir: Path) -> Dict[str, Any]:
        """Instancie les collecteurs du scan et associe chaque étape à sa collecte"""
        common = dict(config=self.config, logger=self.logger, inquiry=self.inquiry,
                      classifier=self.classifier, archiver=self.archiver, staging_dir=staging_dir)

        hardware = HardwareCollector(**common)
        include_fonts = request.include_fonts or self.config.getboolean('auditor', 'include_fonts', False)

        simple = {
            'account': AccountCollector(**common),
            'browsers': BrowserCollector(**common),
            'email': EmailAccountCollector(**common),
            'cloud_storage': CloudStorageCollector(**common),
            'fonts': FontCollector(include_fonts=include_fonts, **common),
            'applications_folder': ApplicationsFolderCollector(**common),
            'network_volumes': NetworkVolumeCollector(**common),
            'deep_scan': DeepApplicationCollector(**common),
            'peripherals': PeripheralCollector(**common),
            'printers': PrinterCollector(**common),
            'homebrew': HomebrewCollector(**common),
            'music': MusicLibraryCollector(**common),
            'photos': PhotosLibraryCollector(**common),
        }

        runners: Dict[str, Any] = {
            'storage': lambda: hardware.run(hardware.collect_storage, hardware.storage_placeholder()),
            'memory': lambda: hardware.run(hardware.collect_memory_and_chip, hardware.memory_placeholder()),
            'identity': lambda: hardware.run(hardware.collect_identity, hardware.identity_placeholder()),
        }
        for key, collector in simple.items():
            runners[key] = collector.run

        runners['_all'] = [hardware, *simple.values()]
        return runners

    def _run_step(self, step: ScanStep, step_start: float, step_end: float,
                  collectors: Dict[str, Any], scan_config: Dict[str, Any]):
        """
        Exécute une étape et publie sa progression

        L'étape synthétique est animée par un ticker annulé dès le retour
        de la collecte ; la progression saute alors à la fin de l'étape.
        """
        step_start_time = time.time()
        self._publish(step.key, step_start, step.status)
        runner: Callable[[], List[InventoryItem]] = collectors[step.key]

        try:
            if step.synthetic:
                ticker = SyntheticProgress(
                    step_start, step_end,
                    on_tick=lambda value: self._publish(step.key, value, step.status),
                    duration=scan_config['deep_scan_expected_seconds'],
                    tick_seconds=scan_config['progress_tick_seconds'],
                    logger=self.logger
                )
                with ticker:
                    new_items = runner()
            else:
                new_items = runner()
        except Exception:
            self.logger.exception(f"Erreur inattendue à l'étape {step.key}")
            new_items = []

        with self._lock:
            self._items.extend(new_items)

        self._publish(step.key, step_end, step.status, tuple(new_items))
        self.logger.info(f"Étape {step.key}: {len(new_items)} élément(s) "
                         f"en {time.time() - step_start_time:.2f}s")

    def _finalize(self, request: ScanRequest, staging_dir: Path, result: ScanResult) -> ScanResult:
        """
        Écrit les rapports et crée l'archive

        En cas d'échec, l'état est FAILED et l'inventaire reste disponible.
        """
        with self._lock:
            self._state = ScanState.FINALIZING
        self._publish("finalize", FINALIZE_START, "Saving Report...")

        safe_name = sanitize_name(request.display_name)
        items = self.items

        try:
            write_csv(items, staging_dir / f"Audit_Report_{safe_name}.csv")
            write_html(items, request.display_name, staging_dir / f"Dashboard_{safe_name}.html")

            fonts_dir = staging_dir / CAPTURED_FONTS_DIR
            if fonts_dir.is_dir() and not any(fonts_dir.iterdir()):
                fonts_dir.rmdir()

            self._publish("finalize", 0.98, "Finalising package...")

            output_dir = Path(request.output_dir) if request.output_dir else self.config.output_dir
            archive_name = f"Migration_Data_{safe_name}_{datetime.now().strftime('%Y-%m-%d')}.zip"
            result.archive_path = self.archiver.archive(staging_dir, output_dir / archive_name)
            result.state = ScanState.COMPLETE

        except (OSError, ArchiveError) as e:
            self.logger.error(f"Échec de la finalisation: {e}")
            result.state = ScanState.FAILED
            result.archive_path = None
            result.error = str(e)

        return result

    def _publish(self, step: str, fraction: float, status: str,
                 delta: Tuple[InventoryItem, ...] = ()):
        with self._lock:
            self._fraction = max(self._fraction, fraction)
            self._status = status
            event = ProgressEvent(step=step, fraction=self._fraction, status=status,
                                  item_count=len(self._items), delta=delta)
        self.events.put(event)
