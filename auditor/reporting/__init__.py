"""
Package des générateurs de rapports

- CSV (tableau plat, quatre colonnes)
- Tableau de bord HTML autonome (Jinja2)
- Rapport PDF paginé (reportlab)
"""
