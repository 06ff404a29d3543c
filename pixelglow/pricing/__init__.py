"""
Feature 'pricing': catalogue des plans, codes promo et résolution de prix.
"""
