import pytest
from models import Referral


def individual_payload(**overrides):
    payload = {
        "referralType": "individual",
        "fullName": "Chinedu Eze",
        "email": "chinedu@example.com",
        "phone": "08098765432",
        "address": "12 Allen Avenue, Ikeja",
        "ninNumber": "12345678901",
        "stateOfResident": "Lagos",
        "stateOfOrigin": "Enugu",
        "password": "supersecret",
        "confirmPassword": "supersecret",
        "bankName": "First Bank",
        "accountNumber": "0123456789",
        "accountName": "Chinedu Eze",
    }
    payload.update(overrides)
    return payload


def institution_payload(**overrides):
    payload = individual_payload()
    for key in ("fullName", "email", "phone", "address"):
        del payload[key]
    payload.update({
        "referralType": "institution",
        "institutionName": "Unity College",
        "presidentName": "Grace Bello",
        "presidentEmail": "president@unity.edu.ng",
        "presidentPhone": "08011112222",
        "institutionAddress": "1 College Road, Abuja",
    })
    payload.update(overrides)
    return payload


def test_register_individual(client, session):
    res = client.post("/api/referrals", json=individual_payload())
    assert res.status_code == 201
    referral = session.get(Referral, res.json()["referralId"])
    assert referral.referral_type == "individual"
    assert referral.name == referral.contact_name == "Chinedu Eze"
    assert referral.commission_rate == 0.25


def test_register_institution(client, session):
    res = client.post("/api/referrals", json=institution_payload())
    assert res.status_code == 201
    referral = session.get(Referral, res.json()["referralId"])
    assert referral.name == "Unity College"
    assert referral.contact_name == "Grace Bello"
    assert referral.email == "president@unity.edu.ng"


def test_password_is_not_stored(client, session):
    res = client.post("/api/referrals", json=individual_payload())
    referral = session.get(Referral, res.json()["referralId"])
    columns = {c.name for c in Referral.__table__.columns}
    assert not {"password", "confirm_password"} & columns
    assert "supersecret" not in {str(getattr(referral, c)) for c in columns}


def test_unknown_referral_type(client):
    res = client.post("/api/referrals", json=individual_payload(referralType="company"))
    assert res.status_code == 400
    assert res.json() == {"error": "referralType must be 'institution' or 'individual'"}


def test_missing_field(client):
    res = client.post("/api/referrals", json=institution_payload(presidentEmail=""))
    assert res.status_code == 400
    assert res.json() == {"error": "presidentEmail is required"}


@pytest.mark.parametrize(
    "overrides,message",
    [
        ({"ninNumber": "1234"}, "NIN number must be exactly 11 digits"),
        ({"ninNumber": "1234567890A"}, "NIN number must be exactly 11 digits"),
        ({"ninNumber": "\u0661" * 11}, "NIN number must be exactly 11 digits"),
        ({"password": "short", "confirmPassword": "short"}, "Password must be at least 8 characters long"),
        ({"confirmPassword": "different1"}, "Passwords do not match"),
    ],
)
def test_referral_rules(client, overrides, message):
    res = client.post("/api/referrals", json=individual_payload(**overrides))
    assert res.status_code == 400
    assert res.json() == {"error": message}


def test_upstream_failure(client, failing_mutations):
    res = client.post("/api/referrals", json=individual_payload())
    assert res.status_code == 500
    assert res.json() == {"error": "Failed to register referral"}
