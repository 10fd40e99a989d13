"""
Package des adaptateurs spécifiques à la plateforme

Ce package contient l'adaptateur qui utilise les outils natifs macOS
(system_profiler, defaults, profiles, sw_vers, brew) et psutil.
"""
