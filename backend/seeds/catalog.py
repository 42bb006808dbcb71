"""Seed definitions for the workshop catalog.
Single source of truth for scripts/seed_workshop.py and local demos.
"""

CLIENTS = [
    {'name': 'Garage El Amal', 'phone': '71 222 333'},
    {'name': 'Auto Service Sfax', 'phone': '74 400 120'},
    {'name': 'Particulier', 'phone': None},
]

# Caliper models, one per car model / axle variant
ETRIERS = [
    'Peugeot 208',
    'Peugeot 308',
    'Renault Clio 4',
    'Volkswagen Golf 7',
    'Kia Picanto',
]

# designation, referenceArticle, barCode
PIECES = [
    ('Kit joints piston 54mm', 'KJ-54', '6130000000017'),
    ('Piston 54mm', 'PS-54', '6130000000024'),
    ('Kit guide coulisseau', 'KG-01', '6130000000031'),
    ('Vis de purge', 'VP-10', '6130000000048'),
    ('Soufflet piston', 'SP-54', '6130000000055'),
]
