"""
Module de progression pour l'auditeur de migration

Ce module gère :
- Les événements de progression publiés pendant un scan
- La progression synthétique pendant les étapes longues et muettes
  (scan approfondi des applications)
"""

import threading
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

import schedule

from .models import InventoryItem


@dataclass(frozen=True)
class ProgressEvent:
    """
    Événement publié sur la file de progression

    Attributes:
        step: Clé de l'étape en cours
        fraction: Avancement global entre 0 et 1 (monotone)
        status: Message lisible
        item_count: Nombre total d'éléments collectés à cet instant
        delta: Éléments ajoutés par cet événement (vide pour un tick)
    """
    step: str
    fraction: float
    status: str
    item_count: int
    delta: Tuple[InventoryItem, ...] = ()


class SyntheticProgress:
    """
    Ticker de progression annulable

    Fait avancer une valeur de start vers target à intervalle régulier,
    sans jamais dépasser target. Après cancel(), plus aucune valeur n'est publiée.
    Utilise une instance dédiée de schedule.Scheduler pour ne pas interférer
    avec d'autres planifications du processus.
    """

    def __init__(self, start: float, target: float, on_tick: Callable[[float], None],
                 duration: float = 30.0, tick_seconds: float = 0.1, logger=None):
        """
        Initialise le ticker

        Args:
            start: Valeur initiale
            target: Valeur plafond
            on_tick: Fonction appelée avec chaque nouvelle valeur
            duration: Durée estimée pour atteindre target (secondes)
            tick_seconds: Intervalle entre deux ticks (secondes)
            logger: Logger optionnel
        """
        self.start_value = start
        self.target = target
        self.on_tick = on_tick
        self.tick_seconds = tick_seconds
        self.logger = logger

        steps = max(duration / tick_seconds, 1.0) if tick_seconds > 0 else 1.0
        self.increment = (target - start) / steps

        self._value = start
        self._cancelled = False
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._scheduler = schedule.Scheduler()
        self._thread: Optional[threading.Thread] = None

    @property
    def value(self) -> float:
        with self._lock:
            return self._value

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        """Démarre le ticker dans un thread dédié"""
        if self._thread is not None:
            return

        self._scheduler.every(self.tick_seconds).seconds.do(self._tick)
        self._thread = threading.Thread(
            target=self._ticker_loop,
            name="SyntheticProgress",
            daemon=True
        )
        self._thread.start()

        if self.logger:
            self.logger.debug(f"Progression synthétique démarrée ({self.start_value:.2f} -> {self.target:.2f})")

    def cancel(self):
        """
        Arrête le ticker

        Aucune valeur n'est publiée après le retour de cette méthode.
        """
        with self._lock:
            self._cancelled = True
        self._stop_event.set()

        if self._thread and self._thread.is_alive() and self._thread is not threading.current_thread():
            self._thread.join(timeout=5)

        self._scheduler.clear()

        if self.logger:
            self.logger.debug(f"Progression synthétique arrêtée à {self._value:.3f}")

    def _tick(self):
        with self._lock:
            if self._cancelled:
                return schedule.CancelJob

            self._value = min(self.target, self._value + self.increment)
            self.on_tick(self._value)

            if self._value >= self.target:
                return schedule.CancelJob
        return None

    def _ticker_loop(self):
        """Boucle du ticker, jusqu'à annulation ou épuisement des tâches"""
        while not self._stop_event.is_set():
            try:
                self._scheduler.run_pending()
            except Exception:
                if self.logger:
                    self.logger.exception("Erreur dans la boucle de progression")
                break

            if not self._scheduler.get_jobs():
                break

            idle = self._scheduler.idle_seconds
            wait = self.tick_seconds if idle is None else min(max(idle, 0.0), self.tick_seconds)
            self._stop_event.wait(timeout=wait)

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.cancel()
        return False
