# classbook/extensions.py
from flask_cors import CORS

# --- Extensions ---
cors = CORS()
