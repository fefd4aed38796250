import requests
import time
import sys
import uuid
from datetime import date

BASE_URL = "http://localhost:8000"
API = f"{BASE_URL}/api/v1"


def check_health():
    print("Checking Health...")
    try:
        resp = requests.get(f"{BASE_URL}/health")
        assert resp.status_code == 200
        print(f"✅ Health Check Passed: {resp.json()}")
    except Exception as e:
        print(f"❌ Health Check Failed: {e}")
        sys.exit(1)


def check_login(username="admin", password="admin123"):
    print("\nChecking Login...")
    resp = requests.post(f"{API}/auth/login", json={"username": username, "password": password})
    if resp.status_code != 200:
        print(f"❌ Login Failed: {resp.text}")
        sys.exit(1)
    data = resp.json()
    print(f"✅ Logged in as {data['user']['name']} ({data['user']['role']})")
    return {"Authorization": f"Bearer {data['access_token']}"}


def check_users(headers):
    print("\nChecking Users Module...")
    username = f"clerk_{uuid.uuid4().hex[:6]}"
    resp = requests.post(f"{API}/users", headers=headers, json={
        "name": "Smoke Clerk",
        "username": username,
        "email": f"{username}@example.com",
        "password": "password123",
        "role": "user"
    })
    if resp.status_code != 201:
        print(f"❌ Create User Failed: {resp.text}")
        return None
    user = resp.json()
    print("✅ Create User Passed")

    resp = requests.delete(f"{API}/users/{user['id']}", headers=headers)
    assert resp.status_code == 200
    print("✅ Delete User Passed")
    return user


def check_clients(headers):
    print("\nChecking Clients Module...")
    resp = requests.post(f"{API}/clients", headers=headers, json={
        "name": "Smoke Borrower",
        "mobile": "+853 6600 0000",
        "occupation": "Other",
        "years_working": 1,
        "amount_borrowed": "5000.00",
        "interest_rate": "10",
        "loan_date": date.today().isoformat()
    })
    if resp.status_code != 201:
        print(f"❌ Create Client Failed: {resp.text}")
        return None
    client = resp.json()
    print("✅ Create Client Passed")

    resp = requests.get(f"{API}/clients/{client['id']}/suggested-interest", headers=headers)
    interest = resp.json()["suggested_interest"]
    print(f"💡 Suggested Interest: {interest}")

    resp = requests.post(f"{API}/clients/{client['id']}/payments", headers=headers, json={
        "capital_paid": "1000.00",
        "interest_paid": interest
    })
    if resp.status_code != 201:
        print(f"❌ Add Payment Failed: {resp.text}")
    else:
        updated = resp.json()["client"]
        print(f"📉 Remaining Balance: {updated['remaining_balance']}")
        assert updated["remaining_balance"] == "4000.00"
        print("✅ Add Payment Passed")
    return client


def check_dashboard(headers, client):
    print("\nChecking Dashboard...")
    resp = requests.get(f"{API}/dashboard", headers=headers)
    assert resp.status_code == 200
    data = resp.json()
    print(f"📊 Outstanding: {data['stats']['total_outstanding']} {data['stats']['currency']}")
    print(f"🕒 Latest Activity: {data['recent_activity'][0]['action']}")
    print("✅ Dashboard Passed")

    resp = requests.delete(f"{API}/clients/{client['id']}", headers=headers)
    assert resp.status_code == 200
    print("✅ Delete Client Passed")


if __name__ == "__main__":
    # Wait for server to start
    time.sleep(2)

    check_health()
    headers = check_login()
    check_users(headers)
    client = check_clients(headers)
    if client:
        check_dashboard(headers, client)

    print("\n🎉 All Smoke Checks Passed!")
