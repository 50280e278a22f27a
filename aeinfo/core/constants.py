"""
Fixed values of the diagnostic endpoint.
"""

# reserved administrative prefix
SERVE_URL = "/_ah/aeinfo/"

# the only queue reported
DEFAULT_QUEUE = "default"
DEFAULT_QUEUE_RATE = 5.0

# ==================== Edge headers ====================
HEADER_COUNTRY = "X-AppEngine-Country"
HEADER_REGION = "X-AppEngine-Region"
HEADER_CITY = "X-AppEngine-City"
HEADER_CITY_LAT_LONG = "X-AppEngine-CityLatLong"

# ==================== Rolling windows (seconds) ====================
WINDOW_1M = 60
WINDOW_10M = 600

# ==================== Messages ====================
FORBIDDEN_MESSAGE = "Forbidden"
QUEUE_STATS_MESSAGE = "unable to gather taskqueue stats"
