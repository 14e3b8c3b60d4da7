import os
from dotenv import load_dotenv
from pathlib import Path

# Always load .env from same folder as this file
env_path = Path(__file__).resolve().parent / ".env"
load_dotenv(dotenv_path=env_path)

# Vault runtime
VAULT_CONFIG_PATH = os.getenv("VAULT_CONFIG", "config/vault.yaml")
VAULT_EVENTS_PATH = os.getenv("VAULT_EVENTS_PATH")

# Simulator output
SIMULATION_OUT_DIR = os.getenv("SIMULATION_OUT_DIR", "logs/simulation")
