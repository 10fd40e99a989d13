"""
Point d'entrée principal du Mac Migration Auditor

Ce module orchestre les composants de l'auditeur et peut être exécuté
de deux manières :
- En mode scan (ligne de commande, progression affichée dans le terminal)
- En mode interface web locale
"""

import argparse
import queue
import signal
import sys
from pathlib import Path

from auditor.core.collector import (InventoryAggregator, ScanAlreadyRunningError, ScanRequest,
                                    ScanState, STEP_KEYS)
from auditor.core.config import AuditorConfig, create_default_config
from auditor.core.logger import AuditorLogger
from auditor.reporting.pdf_report import export_pdf
from auditor.web.app import AuditorWebApp


class MigrationAuditor:
    """
    Auditeur de migration principal

    Cette classe relie la configuration, le logging et l'agrégateur, et
    gère les différents modes de fonctionnement.
    """

    def __init__(self, config_path=None):
        """
        Initialise l'auditeur

        Args:
            config_path: Chemin vers le fichier de configuration
        """
        self.config = AuditorConfig(config_path)

        self.logger = AuditorLogger(self.config)
        self.app_logger = self.logger.get_logger()

        self.aggregator = InventoryAggregator(self.config, self.logger)
        self.web_app = None

        self.app_logger.info("Mac Migration Auditor initialisé")

    def run_scan_mode(self, display_name, include_fonts=False, output_dir=None,
                      steps=None, export=False):
        """
        Lance un scan et affiche la progression jusqu'à la fin

        Args:
            display_name: Nom de l'utilisateur audité
            include_fonts: Copier les polices dans l'archive
            output_dir: Dossier de destination de l'archive
            steps: Sous-ensemble d'étapes à exécuter
            export: Exporter aussi le rapport PDF

        Returns:
            bool: True si le scan s'est terminé avec succès
        """
        self.logger.log_system_info()

        request = ScanRequest(
            display_name=display_name,
            include_fonts=include_fonts,
            output_dir=Path(output_dir) if output_dir else None,
            steps=steps
        )

        self.aggregator.start_background(request)
        self._follow_progress()
        result = self.aggregator.wait()

        print(f"\n📋 {len(result.items)} éléments inventoriés en {result.duration:.1f}s")

        if result.state != ScanState.COMPLETE:
            print(f"❌ Scan échoué: {result.error}")
            return False

        print(f"✅ Archive créée: {result.archive_path}")

        if export:
            pdf_path = export_pdf(result.items, display_name, result.archive_path.parent)
            print(f"✅ Rapport PDF: {pdf_path}")

        return True

    def _follow_progress(self):
        """Affiche les événements de progression jusqu'à l'événement final"""
        final_steps = (ScanState.COMPLETE.value, ScanState.FAILED.value)
        last_status = None

        while True:
            try:
                event = self.aggregator.events.get(timeout=1.0)
            except queue.Empty:
                if not self.aggregator.is_scanning:
                    break
                continue

            if event.status != last_status:
                print(f"\n🔍 {event.status}")
                last_status = event.status

            print(f"\r   {event.fraction * 100:5.1f}%  ({event.item_count} éléments)", end="", flush=True)

            if event.step in final_steps:
                print()
                break

    def run_web_mode(self):
        """Lance l'interface web locale"""
        self.app_logger.info("Démarrage en mode interface web")

        web_config = self.config.get_web_config()
        if not web_config['enabled']:
            self.app_logger.warning("Interface web désactivée dans la configuration, démarrage forcé")

        self._setup_signal_handlers()

        try:
            self.web_app = AuditorWebApp(config=self.config, aggregator=self.aggregator)
            print(f"🌐 Interface web: http://{web_config['host']}:{web_config['port']}")
            self.web_app.run()

        except KeyboardInterrupt:
            self.app_logger.info("Interface web arrêtée")

    def _setup_signal_handlers(self):
        """
        Configure les gestionnaires de signaux pour l'arrêt propre
        """
        def signal_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            self.app_logger.info(f"Signal {signal_name} reçu - Arrêt en cours...")
            raise KeyboardInterrupt

        if hasattr(signal, 'SIGTERM'):
            signal.signal(signal.SIGTERM, signal_handler)

    def get_status(self):
        """
        Retourne le statut actuel de l'auditeur

        Returns:
            dict: Statut du scan et de la configuration
        """
        return {
            'scan': self.aggregator.get_status(),
            'config': {
                'file': self.config.config_file,
                'valid': self.config.validate(),
                'output_dir': str(self.config.output_dir)
            }
        }


def main():
    """
    Point d'entrée principal avec gestion des arguments de ligne de commande
    """
    parser = argparse.ArgumentParser(
        description='Mac Migration Auditor - Inventaire d\'un poste macOS avant migration'
    )

    parser.add_argument(
        '--config', '-c',
        type=str,
        help='Chemin vers le fichier de configuration'
    )

    parser.add_argument(
        '--mode', '-m',
        choices=['scan', 'web'],
        default='scan',
        help='Mode de fonctionnement de l\'auditeur'
    )

    parser.add_argument(
        '--name', '-n',
        type=str,
        help='Nom de l\'utilisateur audité (mode scan)'
    )

    parser.add_argument(
        '--include-fonts',
        action='store_true',
        help='Copie les polices trouvées dans l\'archive'
    )

    parser.add_argument(
        '--output-dir', '-o',
        type=str,
        help='Dossier de destination de l\'archive'
    )

    parser.add_argument(
        '--steps',
        type=str,
        help=f'Étapes à exécuter, séparées par des virgules ({", ".join(STEP_KEYS)})'
    )

    parser.add_argument(
        '--pdf',
        action='store_true',
        help='Exporte aussi le rapport PDF à côté de l\'archive'
    )

    parser.add_argument(
        '--create-config',
        action='store_true',
        help='Crée un fichier de configuration par défaut'
    )

    parser.add_argument(
        '--validate-config',
        action='store_true',
        help='Valide la configuration actuelle'
    )

    parser.add_argument(
        '--status',
        action='store_true',
        help='Affiche le statut de l\'auditeur'
    )

    args = parser.parse_args()

    if args.create_config:
        config_path = args.config or input("Chemin du fichier de configuration à créer: ")
        try:
            create_default_config(config_path)
            print(f"✅ Configuration par défaut créée: {config_path}")
            return 0
        except Exception as e:
            print(f"❌ Erreur création configuration: {e}")
            return 1

    try:
        auditor = MigrationAuditor(args.config)
    except Exception as e:
        print(f"❌ Erreur initialisation auditeur: {e}")
        return 1

    if args.validate_config:
        if auditor.config.validate():
            print("✅ Configuration valide")
            return 0
        else:
            print("❌ Configuration invalide")
            return 1

    if args.status:
        status = auditor.get_status()
        print(f"Config File: {status['config']['file']}")
        print(f"Config Valid: {'✅' if status['config']['valid'] else '❌'}")
        print(f"Output Dir: {status['config']['output_dir']}")
        print(f"Scan State: {status['scan']['state']}")
        return 0

    try:
        if args.mode == 'web':
            auditor.run_web_mode()
            return 0

        display_name = args.name or input("Nom de l'utilisateur audité: ")
        steps = [s.strip() for s in args.steps.split(',') if s.strip()] if args.steps else None

        ok = auditor.run_scan_mode(
            display_name,
            include_fonts=args.include_fonts,
            output_dir=args.output_dir,
            steps=steps,
            export=args.pdf
        )
        return 0 if ok else 1

    except ScanAlreadyRunningError as e:
        print(f"❌ {e}")
        return 1
    except KeyboardInterrupt:
        print("\n🛑 Arrêt demandé par l'utilisateur")
        return 0
    except Exception as e:
        print(f"❌ Erreur: {e}")
        return 1


if __name__ == '__main__':
    exit_code = main()
    sys.exit(exit_code)
