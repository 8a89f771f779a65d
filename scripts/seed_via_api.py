import subprocess
import time
import json
import os
import signal
import requests
import random
from decimal import Decimal
from datetime import date, timedelta
from faker import Faker

# --- Configuration ---
BASE_URL = "http://127.0.0.1:8000"
UVICORN_COMMAND = ["uvicorn", "finance_tracker.main:app"]

SEED_USERNAME = "testuser"
SEED_EMAIL = "testuser@example.com"
SEED_PASSWORD = "aStrongPassword123"

EXPENSE_CATEGORIES = ["Food", "Rent", "Utilities", "Transport", "Entertainment", "Health", "Shopping"]
INCOME_CATEGORIES = ["Salary", "Freelance", "Interest"]

fake = Faker()
session_token = None


# --- Helper Function for API Requests ---
def run_api_request(method: str, endpoint: str, data: dict = None):
    """Makes an API request and returns the JSON response."""
    url = f"{BASE_URL}{endpoint}"
    try:
        # The default json encoder in requests cannot handle Decimal, so we need a custom one
        json_data = json.dumps(data, default=str) if data else None
        headers = {'Content-Type': 'application/json'} if json_data else {}
        if session_token:
            headers['Authorization'] = f"Bearer {session_token}"
        response = requests.request(method, url, data=json_data, headers=headers, timeout=10)
        response.raise_for_status()
        if not response.text:
            return None
        return response.json()
    except requests.exceptions.HTTPError as e:
        print(f"Error: HTTP {e.response.status_code} for {url}\nResponse: {e.response.text}")
        return None
    except requests.exceptions.RequestException as e:
        print(f"An unexpected error occurred: {e}")
        return None


def login():
    global session_token
    print("--- Ensuring User Exists ---")
    run_api_request("POST", "/users/register", {
        "username": SEED_USERNAME, "email": SEED_EMAIL, "password": SEED_PASSWORD
    })
    result = run_api_request("POST", "/users/login", {"identifier": SEED_USERNAME, "password": SEED_PASSWORD})
    if not result:
        raise RuntimeError("Could not log in as the seed user")
    session_token = result["session_token"]


def seed_transactions(count: int = 200):
    print("--- Seeding Transactions ---")
    transactions = []
    for _ in range(count):
        is_expense = random.random() > 0.25
        trans_data = {
            "date": fake.date_between(start_date="-1y", end_date="today").isoformat(),
            "amount": Decimal(random.uniform(5, 800)).quantize(Decimal('0.01')),
            "kind": "Expense" if is_expense else "Income",
            "category": random.choice(EXPENSE_CATEGORIES if is_expense else INCOME_CATEGORIES),
            "description": fake.bs(),
        }
        trans = run_api_request("POST", "/transactions/", trans_data)
        if trans:
            transactions.append(trans)
    return transactions


def seed_budgets(months: int = 3):
    print("--- Seeding Budgets ---")
    month = date.today().replace(day=1)
    for _ in range(months):
        for category in random.sample(EXPENSE_CATEGORIES, k=4):
            run_api_request("PUT", "/budgets/", {
                "month": month.strftime("%Y-%m"),
                "category": category,
                "amount": Decimal(random.uniform(200, 1200)).quantize(Decimal('0.01')),
            })
        month = (month - timedelta(days=1)).replace(day=1)


def main():
    """Starts the server, seeds a ledger and budgets for one user, and shuts down the server."""

    print("--- Resetting database with Alembic ---")
    try:
        print("Downgrading database...")
        subprocess.run(["alembic", "downgrade", "base"], check=True, capture_output=True, text=True)
        print("Upgrading database...")
        subprocess.run(["alembic", "upgrade", "head"], check=True, capture_output=True, text=True)
        print("Database reset successfully.")
    except (subprocess.CalledProcessError, FileNotFoundError) as e:
        print(f"Error during database reset: {e}")
        if hasattr(e, 'stderr') and e.stderr:
            print(e.stderr)
        return

    server_process = subprocess.Popen(UVICORN_COMMAND)
    time.sleep(5)
    print(f"Server started with PID: {server_process.pid}")

    try:
        login()
        seed_transactions()
        seed_budgets()

        progress = run_api_request("GET", "/budgets/progress") or []
        for row in progress:
            print(f"{row['category']:<15} budget {row['budget_amount']:>10} spent {row['spent']:>10} remaining {row['remaining']:>10}")

        print("\n--- Seeding Complete ---")

    finally:
        if server_process:
            print("\n--- Shutting down server ---")
            os.kill(server_process.pid, signal.SIGTERM)
            server_process.wait()
            print("Server shut down.")


if __name__ == "__main__":
    main()
