import os

# Isolate the test database and keep outbound integrations switched off.
os.environ["DATABASE_URL"] = "sqlite:///./test_aihub.db"
os.environ["EMAIL_USER"] = ""
os.environ["OPENAI_API_KEY"] = ""
