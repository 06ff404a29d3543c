"""
Feature 'orders' (feature-first): création, capture et vérification des
commandes fournisseur. Les vues sont dans orders.views, l'orchestration
dans orders.service.
"""
