"""
Application-wide constants and environment configuration.
"""
import os

# ===== ENVIRONMENT =====

DATABASE_URL = os.getenv("ECOTRACK_DATABASE_URL", "sqlite:///./ecotrack.db")

DEFAULT_LOG_DIRECTORY_PROD = "/var/log/ecotrack"
DEFAULT_LOG_DIRECTORY_DEV = "./logs"

CORS_ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "ECOTRACK_CORS_ORIGINS", "http://localhost:3000,http://localhost:8081"
    ).split(",")
    if origin.strip()
]

SCHEDULER_ENABLED = os.getenv("ECOTRACK_SCHEDULER_ENABLED", "true").lower() in ("1", "true", "yes")

USER_ID_HEADER = "X-User-Id"

# Shared secret of the action verification service; unset disables verification
VERIFIER_API_KEY = os.getenv("ECOTRACK_VERIFIER_API_KEY", "")
VERIFIER_KEY_HEADER = "X-API-Key"

# ===== EMISSIONS ESTIMATOR =====

KG_PER_TON = 1000.0
WEEKS_PER_YEAR = 52
MONTHS_PER_YEAR = 12

# kg CO2 per mile
CAR_EMISSION_FACTORS = {
    "Gas": 0.404,
    "Hybrid": 0.25,
    "Electric": 0.1,
    "No car": 0.0,
}
DEFAULT_CAR_EMISSION_FACTOR = CAR_EMISSION_FACTORS["Gas"]

KG_PER_FLIGHT = 1000.0

PUBLIC_TRANSPORT_MULTIPLIERS = {
    "Always": 0.5,
    "Often": 0.7,
    "Sometimes": 0.85,
}

KWH_PER_DOLLAR = 10

# kg CO2 per kWh
ENERGY_SOURCE_FACTORS = {
    "Coal/Gas": 0.8,
    "Mixed Grid": 0.5,
    "Some Renewable": 0.3,
    "Mostly Renewable": 0.1,
}
DEFAULT_ENERGY_SOURCE_FACTOR = ENERGY_SOURCE_FACTORS["Mixed Grid"]

HOME_SIZE_MULTIPLIERS = {
    "Studio/1BR": 0.7,
    "2BR": 1.0,
    "3BR": 1.3,
    "4BR+": 1.6,
    "House": 2.0,
}

# kg CO2 per year
DIET_BASE_EMISSIONS = {
    "Vegan": 600.0,
    "Vegetarian": 1200.0,
    "Low Meat": 1800.0,
    "Moderate Meat": 2500.0,
    "Heavy Meat": 3600.0,
}
DEFAULT_DIET_EMISSIONS = DIET_BASE_EMISSIONS["Moderate Meat"]

LOCAL_FOOD_MULTIPLIERS = {
    "Always": 0.8,
    "Often": 0.9,
}

FOOD_WASTE_MULTIPLIERS = {
    "A lot": 1.3,
    "Some": 1.1,
}

CLOTHES_BASE_EMISSIONS = {
    "Weekly": 800.0,
    "Monthly": 400.0,
    "Few times a year": 200.0,
    "Rarely": 100.0,
}
DEFAULT_CLOTHES_EMISSIONS = 300.0

SECOND_HAND_MULTIPLIERS = {
    "Always": 0.3,
    "Often": 0.5,
    "Sometimes": 0.7,
}

KG_PER_PACKAGE = 15.0

WASTE_BASE_EMISSIONS = 300.0

RECYCLING_MULTIPLIERS = {
    "Never": 1.0,
    "Rarely": 0.9,
    "Sometimes": 0.7,
    "Often": 0.5,
    "Always": 0.3,
}

COMPOSTING_MULTIPLIERS = {
    "Always": 0.7,
    "Sometimes": 0.85,
}

PLASTIC_MULTIPLIERS = {
    "Use regularly": 1.3,
    "Never use": 0.6,
}

# ===== ACTIONS =====

ACTION_STATUS_AWAITING_PROOF = "awaiting_proof"
ACTION_STATUS_PENDING = "pending"
ACTION_STATUS_VERIFIED = "verified"
ACTION_STATUS_REJECTED = "rejected"

ACTION_STATUSES = (
    ACTION_STATUS_AWAITING_PROOF,
    ACTION_STATUS_PENDING,
    ACTION_STATUS_VERIFIED,
    ACTION_STATUS_REJECTED,
)

# action_type -> (default description, kg CO2 saved, points)
ACTION_TYPES = {
    "public_transport": ("Used public transport instead of driving", 2.3, 25),
    "energy_saving": ("Turned off lights/electronics", 0.8, 10),
    "recycling": ("Recycled waste properly", 0.5, 8),
    "plant_based_meal": ("Had a vegetarian/vegan meal", 1.2, 15),
    "water_conservation": ("Shorter shower or saved water", 0.3, 5),
    "active_transport": ("Walked or biked instead of driving", 2.8, 30),
}
DEFAULT_ACTION = ("Eco-friendly action", 1.0, 10)

# ===== REWARDS =====

POINTS_PER_LEVEL = 500

REQUIREMENT_ACTION_COUNT = "action_count"

ACTION_REQUIREMENT_TYPES = {
    "public_transport": "transport_actions",
    "active_transport": "transport_actions",
    "energy_saving": "energy_actions",
    "recycling": "recycle_actions",
    "plant_based_meal": "plant_meals",
    "water_conservation": "water_actions",
}

RARITY_ORDER = {
    "common": 0,
    "rare": 1,
    "epic": 2,
    "legendary": 3,
}

# ===== MARKETPLACE =====

REDEMPTION_CODE_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
REDEMPTION_CODE_LENGTH = 8
REDEMPTION_EXPIRY_DAYS = 30

# ===== SETTINGS =====

DEFAULT_THEME = "light_nature"
DEFAULT_LANGUAGE = "en"
DEFAULT_NOTIFICATIONS_ENABLED = True
DEFAULT_PRIVACY_PROFILE = "public"

THEMES = ("light_nature", "dark_eco", "minimalist_white", "earth_tones")
PRIVACY_PROFILES = ("public", "friends", "private")

# ===== SCHEDULER =====

STREAK_MAINTENANCE_TIME = "00:05"
REWARD_EXPIRY_TIME = "00:10"

# ===== CATALOG SEED DATA =====

DEFAULT_BADGES = [
    {"name": "First Step", "description": "Log your first verified eco action",
     "icon": "leaf", "rarity": "common", "requirement_type": "action_count", "requirement_value": 1},
    {"name": "Eco Regular", "description": "Complete 25 verified eco actions",
     "icon": "sprout", "rarity": "rare", "requirement_type": "action_count", "requirement_value": 25},
    {"name": "Planet Guardian", "description": "Complete 100 verified eco actions",
     "icon": "globe", "rarity": "legendary", "requirement_type": "action_count", "requirement_value": 100},
    {"name": "Green Commuter", "description": "Choose transit, walking or cycling 10 times",
     "icon": "bus", "rarity": "rare", "requirement_type": "transport_actions", "requirement_value": 10},
    {"name": "Power Saver", "description": "Save energy 10 times",
     "icon": "zap", "rarity": "common", "requirement_type": "energy_actions", "requirement_value": 10},
    {"name": "Recycling Hero", "description": "Recycle properly 15 times",
     "icon": "recycle", "rarity": "common", "requirement_type": "recycle_actions", "requirement_value": 15},
    {"name": "Plant Powered", "description": "Eat 20 plant-based meals",
     "icon": "salad", "rarity": "epic", "requirement_type": "plant_meals", "requirement_value": 20},
    {"name": "Water Wise", "description": "Conserve water 10 times",
     "icon": "droplet", "rarity": "common", "requirement_type": "water_actions", "requirement_value": 10},
]

DEFAULT_MARKETPLACE_REWARDS = [
    {"partner_name": "GreenBean Coffee", "title": "Free reusable-cup refill",
     "description": "One free drink when you bring your own cup", "category": "food",
     "point_cost": 150, "level_requirement": 1, "original_value": 4.5,
     "discount_percentage": 100, "terms_conditions": "One per visit", "stock_available": 200},
    {"partner_name": "CityBike", "title": "Day pass",
     "description": "24 hours of unlimited bike-share rides", "category": "transport",
     "point_cost": 400, "level_requirement": 1, "original_value": 12.0,
     "discount_percentage": 100, "terms_conditions": "Valid in participating cities", "stock_available": 100},
    {"partner_name": "ReWear", "title": "20% off second-hand clothing",
     "description": "Discount on any pre-loved item", "category": "shopping",
     "point_cost": 600, "level_requirement": 2, "original_value": None,
     "discount_percentage": 20, "terms_conditions": "Online store only", "stock_available": 50},
    {"partner_name": "SolarHome", "title": "Home energy audit",
     "description": "Professional audit of your home's energy use", "category": "energy",
     "point_cost": 2000, "level_requirement": 4, "original_value": 150.0,
     "discount_percentage": 100, "terms_conditions": "Subject to availability", "stock_available": 10},
]
