"""Declarative seed data for the lookup tables."""

# Identifiers are part of the contract: caches and clients treat 1 as sale
# and 2 as rent.
OPERATION_STATUSES = [
    {"id": 1, "name": "sale", "display_name": "Sale", "description": "Property is available for sale", "color": "#2ecc40"},
    {"id": 2, "name": "rent", "display_name": "Rent", "description": "Property is available for rent", "color": "#0074d9"},
    {"id": 3, "name": "buy", "display_name": "Buy", "description": "Buyer looking for a property", "color": "#ffdc00"},
    {"id": 4, "name": "lease", "display_name": "Lease", "description": "Property is available for lease", "color": "#b10dc9"},
]

DEFAULT_OPERATION_STATUS_ID = 1

PROPERTY_STATUSES = [
    {"name": "available", "display_name": "Available", "description": "Available for sale/rent", "color": "#22c55e"},
    {"name": "sold", "display_name": "Sold", "description": "Property has been sold", "color": "#ef4444"},
    {"name": "rented", "display_name": "Rented", "description": "Property has been rented", "color": "#f59e0b"},
    {"name": "pending", "display_name": "Pending", "description": "Sale/rental in progress", "color": "#3b82f6"},
    {"name": "off_market", "display_name": "Off Market", "description": "Temporarily off market", "color": "#6b7280"},
]

PROPERTY_TYPES = [
    {"name": "house", "display_name": "House", "description": "Single family house"},
    {"name": "apartment", "display_name": "Apartment", "description": "Apartment unit"},
    {"name": "duplex", "display_name": "Duplex", "description": "Two-level apartment"},
    {"name": "loft", "display_name": "Loft", "description": "Open-plan living space"},
    {"name": "penthouse", "display_name": "Penthouse", "description": "Luxury top-floor apartment"},
    {"name": "villa", "display_name": "Villa", "description": "Luxury house"},
    {"name": "cabin", "display_name": "Cabin", "description": "Cabin or cottage"},
    {"name": "land", "display_name": "Land", "description": "Land plot"},
    {"name": "office", "display_name": "Office", "description": "Office space"},
    {"name": "commercial", "display_name": "Commercial", "description": "Commercial space"},
]

FEATURES = [
    {"name": "Pool", "category": "outdoor", "icon": "droplet"},
    {"name": "Garden", "category": "outdoor", "icon": "tree"},
    {"name": "Balcony", "category": "outdoor", "icon": "sun"},
    {"name": "Gym", "category": "amenities", "icon": "activity"},
    {"name": "Granite Countertops", "category": "kitchen", "icon": "square"},
    {"name": "Stainless Steel Appliances", "category": "kitchen", "icon": "zap"},
    {"name": "Modern Kitchen", "category": "kitchen", "icon": "home"},
    {"name": "Walk-in Closet", "category": "storage", "icon": "home"},
    {"name": "Laundry Room", "category": "utility", "icon": "home"},
    {"name": "Garage", "category": "parking", "icon": "car"},
    {"name": "Parking", "category": "parking", "icon": "car"},
    {"name": "Security System", "category": "security", "icon": "shield"},
    {"name": "Central Air", "category": "climate", "icon": "wind"},
]
