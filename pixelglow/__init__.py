"""
PixelGlow checkout backend: cycle de vie des commandes (création, capture,
vérification) et enregistrement du plan payé sur le profil utilisateur.
"""
