"""
Package des collecteurs de données pour l'auditeur de migration

Ce package contient tous les collecteurs spécialisés :
- Collecteur de base (classe abstraite)
- Matériel, compte iCloud, navigateurs, messagerie, stockage cloud, polices
- Applications, volumes, périphériques USB, imprimantes, Homebrew, multimédia
- Adaptateur d'interrogation système macOS
"""
