"""
Module Core - Composants principaux de l'auditeur de migration

Ce module contient les fonctionnalités de base de l'auditeur :
- Configuration
- Logging
- Modèle de données et classification
- Agrégation du scan et progression
- Archivage
"""
