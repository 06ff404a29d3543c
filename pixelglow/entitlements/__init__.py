"""
Feature 'entitlements': enregistrement du plan payé sur le profil utilisateur.
"""
