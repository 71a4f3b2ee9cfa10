"""
HealthTrackerAI Infrastructure Layer

External integrations: database, OpenAI, Twilio, Firebase Admin and
USDA FoodData Central, plus metrics and error tracking.
"""
