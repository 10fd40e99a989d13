"""
Module de logging pour l'auditeur de migration

Ce module fournit un système de logging centralisé avec :
- Rotation automatique des logs
- Différents niveaux de log
- Formatage cohérent
"""

import os
import sys
import logging
import logging.handlers


LOGGER_NAME = 'MigrationAuditor'


class AuditorLogger:
    """
    Gestionnaire de logging pour l'auditeur de migration

    Cette classe configure et gère le système de logging pour l'ensemble
    de l'application, avec rotation automatique et formatage approprié.
    """

    def __init__(self, config=None):
        """
        Initialise le système de logging

        Args:
            config: Instance de AuditorConfig pour récupérer les paramètres de log
        """
        self.config = config
        self.logger = logging.getLogger(LOGGER_NAME)

        # Éviter la duplication si déjà configuré
        if not self.logger.handlers:
            self._setup_logging()

    def _setup_logging(self):
        """
        Configure le système de logging avec les handlers appropriés

        Configure :
        - Le niveau de log basé sur la configuration
        - Le formatage des messages
        - La rotation des fichiers de log
        - La sortie console
        """
        if self.config:
            log_level_str = self.config.get('auditor', 'log_level', 'INFO')
            log_file = self.config.get('logging', 'log_file')
            max_size = self.config.getint('logging', 'max_log_size', 10485760)  # 10MB
            backup_count = self.config.getint('logging', 'backup_count', 5)
        else:
            log_level_str = 'INFO'
            log_file = self._get_default_log_file()
            max_size = 10485760  # 10MB
            backup_count = 5

        # Convertir le niveau de log string en constante logging
        log_level = getattr(logging, log_level_str.upper(), logging.INFO)
        self.logger.setLevel(log_level)

        formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        # Handler pour fichier avec rotation
        try:
            log_dir = os.path.dirname(log_file)
            if log_dir and not os.path.exists(log_dir):
                os.makedirs(log_dir, exist_ok=True)

            file_handler = logging.handlers.RotatingFileHandler(
                filename=log_file,
                maxBytes=max_size,
                backupCount=backup_count,
                encoding='utf-8'
            )
            file_handler.setLevel(log_level)
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

        except Exception as e:
            print(f"Erreur lors de la configuration du logging fichier: {e}")

        # Handler pour la console
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(logging.Formatter(fmt='%(levelname)s - %(message)s'))
        self.logger.addHandler(console_handler)

        self.logger.info("Système de logging initialisé")
        if self.config:
            self.logger.info(f"Niveau de log: {log_level_str}")
            self.logger.info(f"Fichier de log: {log_file}")

    def _get_default_log_file(self) -> str:
        """
        Détermine le fichier de log par défaut selon la plateforme

        Returns:
            str: Chemin vers le fichier de log par défaut
        """
        if sys.platform == "darwin":
            return os.path.join(os.path.expanduser("~"), "Library", "Logs", "MigrationAuditor", "auditor.log")
        return "/tmp/migration-auditor.log"

    def get_logger(self) -> logging.Logger:
        """
        Retourne l'instance du logger

        Returns:
            logging.Logger: Instance du logger configuré
        """
        return self.logger

    def debug(self, message: str):
        """Log un message de niveau DEBUG"""
        self.logger.debug(message)

    def info(self, message: str):
        """Log un message de niveau INFO"""
        self.logger.info(message)

    def warning(self, message: str):
        """Log un message de niveau WARNING"""
        self.logger.warning(message)

    def error(self, message: str):
        """Log un message de niveau ERROR"""
        self.logger.error(message)

    def exception(self, message: str):
        """
        Log une exception avec sa stack trace

        Args:
            message: Message descriptif de l'erreur
        """
        self.logger.exception(message)

    def log_system_info(self):
        """
        Log les informations système de base au démarrage

        Utile pour le diagnostic d'un scan incomplet
        """
        self.info(f"Plateforme: {sys.platform}")
        self.info(f"Version Python: {sys.version}")

        try:
            import getpass
            self.info(f"Utilisateur: {getpass.getuser()}")
        except Exception:
            self.info("Utilisateur: Non déterminé")

    def log_config_info(self, config):
        """
        Log les informations de configuration

        Args:
            config: Instance de AuditorConfig
        """
        self.info("=== Configuration de l'auditeur ===")
        self.info(f"Dossier de sortie: {config.output_dir}")
        self.info(f"Répertoire analysé: {config.home_dir}")

        for key, value in config.get_scan_config().items():
            self.info(f"Scan.{key}: {value}")

        for key, value in config.get_web_config().items():
            self.info(f"Web.{key}: {value}")

        self.info("=== Fin configuration ===")


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """
    Fonction utilitaire pour récupérer un logger nommé

    Args:
        name: Nom du logger

    Returns:
        logging.Logger: Instance du logger
    """
    return logging.getLogger(name)
