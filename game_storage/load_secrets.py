import os
from dotenv import load_dotenv

load_dotenv()

db_backend = os.getenv("DB_BACKEND", "sqlite")
user = os.getenv("DB_USER")
password = os.getenv("DB_PASSWORD")
host = os.getenv("DB_HOST", "localhost")
port = os.getenv("DB_PORT", "5432")
db_name = os.getenv("DB_NAME")
sqlite_path = os.getenv("SQLITE_PATH")
# seconds a write waits for the SQLite lock; must outlast a match-service call
sqlite_busy_timeout = float(os.getenv("SQLITE_BUSY_TIMEOUT", "30.0"))

match_service_url = os.getenv("MATCH_SERVICE_URL", "https://localhost:5001")
# seconds
match_service_timeout = float(os.getenv("MATCH_SERVICE_TIMEOUT", "5.0"))
# connection-establishment retries only
match_service_retries = int(os.getenv("MATCH_SERVICE_RETRIES", "1"))

log_level = os.getenv("LOG_LEVEL", "INFO")

if __name__ == "__main__":
    print(db_backend, user, host, port, db_name, sqlite_path, match_service_url)
