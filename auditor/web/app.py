"""
Application Flask pour l'interface web de l'auditeur

Cette application fournit une interface locale permettant de lancer un scan,
de suivre sa progression, de parcourir l'inventaire et d'exporter un PDF.
"""

import logging
import os
from datetime import datetime
from typing import List, Optional

from flask import Flask, jsonify, render_template, request

from ..core.collector import InventoryAggregator, ScanAlreadyRunningError, ScanRequest, ScanState
from ..core.config import AuditorConfig
from ..core.logger import AuditorLogger
from ..core.models import ItemCategory, filter_items
from ..reporting.pdf_report import export_pdf


def parse_categories(values: List[str]) -> List[ItemCategory]:
    """
    Convertit les catégories reçues en requête

    Une catégorie est reconnue par son nom (DEVICE) ou son libellé
    (External Peripherals), sans tenir compte de la casse.

    Raises:
        ValueError: Si une catégorie est inconnue
    """
    categories = []
    for raw in values:
        for value in raw.split(','):
            value = value.strip()
            if not value:
                continue
            match = next((c for c in ItemCategory
                          if value.casefold() in (c.name.casefold(), c.label.casefold())), None)
            if match is None:
                raise ValueError(f"Catégorie inconnue: {value}")
            categories.append(match)
    return categories


class AuditorWebApp:
    """
    Application web Flask pour l'auditeur de migration

    Cette classe encapsule l'application Flask et l'agrégateur dont elle
    expose l'état. Un seul scan peut être actif à la fois.
    """

    def __init__(self, config_path=None, config: Optional[AuditorConfig] = None,
                 aggregator: Optional[InventoryAggregator] = None):
        """
        Initialise l'application web

        Args:
            config_path: Chemin vers le fichier de configuration
            config: Configuration déjà chargée (prioritaire sur config_path)
            aggregator: Agrégateur à utiliser (créé si absent)
        """
        self.config = config or AuditorConfig(config_path)

        self.logger = AuditorLogger(self.config)
        self.app_logger = self.logger.get_logger()

        self.aggregator = aggregator or InventoryAggregator(self.config, self.logger)

        self.app = Flask(__name__, template_folder=os.path.join(os.path.dirname(__file__), 'templates'))

        # Désactiver les logs Flask pour éviter la pollution
        log = logging.getLogger('werkzeug')
        log.setLevel(logging.ERROR)

        self.app_status = {
            'display_name': None,
            'last_scan_time': None,
            'last_export_path': None
        }

        self._register_routes()

        self.app_logger.info("Interface web initialisée")

    def _register_routes(self):
        """Enregistre toutes les routes Flask"""

        @self.app.route('/')
        def index():
            try:
                return render_template('index.html',
                                       status=self.aggregator.get_status(),
                                       categories=list(ItemCategory))
            except Exception as e:
                self.app_logger.error(f"Erreur page index: {e}")
                return f"Erreur: {str(e)}", 500

        @self.app.route('/api/scan', methods=['POST'])
        def api_scan():
            """API pour démarrer un scan en arrière-plan"""
            try:
                if self.aggregator.is_scanning:
                    return jsonify({
                        'success': False,
                        'message': 'Un scan est déjà en cours'
                    }), 400

                data = request.get_json(silent=True) or {}
                display_name = str(data.get('name', '')).strip()
                if not display_name:
                    return jsonify({
                        'success': False,
                        'message': 'Nom de l\'utilisateur requis'
                    }), 400

                scan_request = ScanRequest(
                    display_name=display_name,
                    include_fonts=bool(data.get('include_fonts', False))
                )

                try:
                    self.aggregator.start_background(scan_request)
                except ScanAlreadyRunningError as e:
                    return jsonify({'success': False, 'message': str(e)}), 400

                self.app_status['display_name'] = display_name
                self.app_status['last_scan_time'] = datetime.now()
                self.app_logger.info(f"Scan démarré via web pour {display_name}")

                return jsonify({
                    'success': True,
                    'message': 'Scan démarré'
                })

            except Exception as e:
                self.app_logger.error(f"Erreur API scan: {e}")
                return jsonify({
                    'success': False,
                    'message': f'Erreur: {str(e)}'
                }), 500

        @self.app.route('/api/status')
        def api_status():
            try:
                return jsonify(self._get_status_info())
            except Exception as e:
                self.app_logger.error(f"Erreur API status: {e}")
                return jsonify({'error': str(e)}), 500

        @self.app.route('/api/items')
        def api_items():
            """API pour parcourir l'inventaire (recherche et filtre par catégorie)"""
            # Inventaire partiel tant que la collecte n'est pas terminée
            if self.aggregator.state == ScanState.SCANNING:
                return jsonify({
                    'success': False,
                    'message': 'Inventaire indisponible pendant le scan'
                }), 400

            try:
                categories = parse_categories(request.args.getlist('category'))
            except ValueError as e:
                return jsonify({'success': False, 'message': str(e)}), 400

            items = filter_items(self.aggregator.items, request.args.get('q', ''), categories)
            return jsonify({
                'success': True,
                'count': len(items),
                'items': [item.to_dict() for item in items]
            })

        @self.app.route('/api/export-pdf', methods=['POST'])
        def api_export_pdf():
            """API pour exporter la sélection courante en PDF"""
            try:
                if self.aggregator.is_scanning:
                    return jsonify({
                        'success': False,
                        'message': 'Export impossible pendant un scan'
                    }), 400

                data = request.get_json(silent=True) or {}
                try:
                    categories = parse_categories(data.get('categories', []))
                except ValueError as e:
                    return jsonify({'success': False, 'message': str(e)}), 400

                items = filter_items(self.aggregator.items, data.get('q', ''), categories)
                if not items:
                    return jsonify({
                        'success': False,
                        'message': 'Aucun élément à exporter'
                    }), 400

                display_name = data.get('name') or self.app_status['display_name'] or ''
                path = export_pdf(items, display_name, self.config.output_dir)
                self.app_status['last_export_path'] = str(path)
                self.app_logger.info(f"Rapport PDF exporté: {path}")

                return jsonify({
                    'success': True,
                    'message': 'Rapport PDF exporté',
                    'path': str(path)
                })

            except Exception as e:
                self.app_logger.error(f"Erreur API export-pdf: {e}")
                return jsonify({
                    'success': False,
                    'message': f'Erreur: {str(e)}'
                }), 500

    def _get_status_info(self) -> dict:
        """
        Récupère les informations de statut complètes

        Returns:
            dict: Statut du scan et de l'interface
        """
        status = self.aggregator.get_status()
        status.update({
            'display_name': self.app_status['display_name'],
            'last_scan_time': (self.app_status['last_scan_time'].isoformat()
                               if self.app_status['last_scan_time'] else None),
            'last_export_path': self.app_status['last_export_path'],
            'status_timestamp': datetime.now().isoformat()
        })
        return status

    def run(self, host='127.0.0.1', port=18744, debug=False):
        """
        Lance l'application Flask

        Args:
            host: Adresse d'écoute
            port: Port d'écoute
            debug: Mode debug Flask
        """
        try:
            web_config = self.config.get_web_config()
            host = web_config.get('host', host)
            port = web_config.get('port', port)

            self.app_logger.info(f"Démarrage interface web sur http://{host}:{port}")

            self.app.run(
                host=host,
                port=port,
                debug=debug,
                threaded=True,
                use_reloader=False  # le scan tourne dans un thread
            )

        except Exception as e:
            self.app_logger.error(f"Erreur démarrage interface web: {e}")
            raise


def create_app(config_path=None):
    """
    Factory function pour créer l'application Flask

    Args:
        config_path: Chemin vers le fichier de configuration

    Returns:
        AuditorWebApp: Instance de l'application
    """
    return AuditorWebApp(config_path)
