
from dotenv import load_dotenv

# Load environment variables from .env before `load_settings()` reads
# os.environ during application startup.
load_dotenv()
