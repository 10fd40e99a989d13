"""
Package interface web pour l'auditeur de migration

Ce package fournit une interface web locale Flask permettant :
- De lancer un scan et suivre sa progression
- De consulter et filtrer l'inventaire
- D'exporter un rapport PDF de la sélection courante
"""
