API = "/api/v1"


def make_profile(client, headers, name, is_default=False, **overrides):
    payload = {
        "profileName": name,
        "fullName": "Ana Lee",
        "email": "Ana@X.com",
        "mobileNumbers": ["+1 555 010 0100"],
        "linkedinUrl": "https://linkedin.com/in/ana-lee",
        "location": "Lisbon",
        "isDefault": is_default,
    }
    payload.update(overrides)
    r = client.post(f"{API}/profiles", json=payload, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()["profileUuid"]


def list_profiles(client, headers):
    r = client.get(f"{API}/profiles", headers=headers)
    assert r.status_code == 200
    return r.json()["profiles"]


def defaults(profiles):
    return [p["profile_uuid"] for p in profiles if p["is_default"]]


def test_requires_user_header(client):
    r = client.get(f"{API}/profiles")
    assert r.status_code == 401
    assert r.json()["code"] == "USER_ID_REQUIRED"

    r = client.get(f"{API}/profiles", headers={"X-User-Id": "00000000-0000-4000-8000-000000000000"})
    assert r.status_code == 401
    assert r.json()["code"] == "USER_NOT_FOUND"


def test_create_and_get_profile(client, user_headers):
    uuid = make_profile(client, user_headers, "Work")

    r = client.get(f"{API}/profiles/{uuid}", headers=user_headers)
    assert r.status_code == 200
    profile = r.json()["profile"]
    assert profile["profile_name"] == "Work"
    assert profile["email"] == "ana@x.com"
    assert profile["mobile_numbers"] == ["+1 555 010 0100"]
    assert profile["is_default"] is False


def test_list_orders_default_first_then_by_name(client, user_headers):
    make_profile(client, user_headers, "Bravo")
    make_profile(client, user_headers, "Alpha")
    default_uuid = make_profile(client, user_headers, "Zulu", is_default=True)

    profiles = list_profiles(client, user_headers)
    assert [p["profile_name"] for p in profiles] == ["Zulu", "Alpha", "Bravo"]
    assert defaults(profiles) == [default_uuid]


def test_new_default_clears_previous_default(client, user_headers):
    first = make_profile(client, user_headers, "First", is_default=True)
    second = make_profile(client, user_headers, "Second", is_default=True)

    assert defaults(list_profiles(client, user_headers)) == [second]

    r = client.patch(f"{API}/profiles/{first}/set-default", headers=user_headers)
    assert r.status_code == 200
    assert defaults(list_profiles(client, user_headers)) == [first]


def test_update_with_default_flag_keeps_single_default(client, user_headers):
    first = make_profile(client, user_headers, "First", is_default=True)
    second = make_profile(client, user_headers, "Second")

    r = client.put(
        f"{API}/profiles/{second}",
        json={"profileName": "Second v2", "fullName": "Ana Lee", "email": "ana@x.com", "isDefault": True},
        headers=user_headers,
    )
    assert r.status_code == 200

    profiles = list_profiles(client, user_headers)
    assert defaults(profiles) == [second]
    assert {p["profile_name"] for p in profiles} == {"First", "Second v2"}
    assert first not in defaults(profiles)


def test_deleting_default_promotes_oldest_remaining(client, user_headers):
    default_uuid = make_profile(client, user_headers, "Default", is_default=True)
    oldest = make_profile(client, user_headers, "Zeta")
    make_profile(client, user_headers, "Alpha")

    r = client.delete(f"{API}/profiles/{default_uuid}", headers=user_headers)
    assert r.status_code == 200

    profiles = list_profiles(client, user_headers)
    assert len(profiles) == 2
    assert defaults(profiles) == [oldest]


def test_deleting_last_profile_leaves_none(client, user_headers):
    only = make_profile(client, user_headers, "Only", is_default=True)
    assert client.delete(f"{API}/profiles/{only}", headers=user_headers).status_code == 200
    assert list_profiles(client, user_headers) == []


def test_duplicate_is_never_default(client, user_headers):
    original = make_profile(client, user_headers, "Main", is_default=True)

    r = client.post(f"{API}/profiles/{original}/duplicate", headers=user_headers)
    assert r.status_code == 201
    copy_uuid = r.json()["profileUuid"]
    assert copy_uuid != original

    copy = client.get(f"{API}/profiles/{copy_uuid}", headers=user_headers).json()["profile"]
    assert copy["profile_name"] == "Main (Copy)"
    assert copy["is_default"] is False
    assert copy["linkedin_url"] == "https://linkedin.com/in/ana-lee"
    assert defaults(list_profiles(client, user_headers)) == [original]


def test_duplicate_name_stays_within_limit(client, user_headers):
    original = make_profile(client, user_headers, "P" * 100)
    r = client.post(f"{API}/profiles/{original}/duplicate", headers=user_headers)
    copy = client.get(f"{API}/profiles/{r.json()['profileUuid']}", headers=user_headers).json()["profile"]
    assert len(copy["profile_name"]) == 100
    assert copy["profile_name"].endswith(" (Copy)")


def test_missing_profile_returns_404(client, user_headers):
    missing = "11111111-1111-4111-8111-111111111111"
    for method, path in [
        ("get", f"{API}/profiles/{missing}"),
        ("delete", f"{API}/profiles/{missing}"),
        ("patch", f"{API}/profiles/{missing}/set-default"),
        ("post", f"{API}/profiles/{missing}/duplicate"),
    ]:
        r = getattr(client, method)(path, headers=user_headers)
        assert r.status_code == 404
        assert r.json() == {"success": False, "error": "Profile not found", "code": "PROFILE_NOT_FOUND"}


def test_profiles_are_scoped_to_user(client, user_headers):
    uuid = make_profile(client, user_headers, "Private")
    other = client.post(f"{API}/users", json={"fullName": "Bo Chen", "email": "bo@x.com"}).json()["userUuid"]

    r = client.get(f"{API}/profiles/{uuid}", headers={"X-User-Id": other})
    assert r.status_code == 404


def test_invalid_uuid_path_is_rejected(client, user_headers):
    r = client.get(f"{API}/profiles/not-a-uuid", headers=user_headers)
    assert r.status_code == 422
    assert r.json()["code"] == "VALIDATION_ERROR"


def test_profile_validation_errors(client, user_headers):
    base = {"profileName": "Work", "fullName": "Ana Lee", "email": "ana@x.com"}
    bad_payloads = [
        {**base, "email": "not-an-email"},
        {**base, "profileName": "   "},
        {**base, "profileName": "x" * 101},
        {**base, "linkedinUrl": "https://example.com/ana"},
        {**base, "mobileNumbers": ["abc"]},
        {**base, "mobileNumbers": "not json"},
    ]
    for payload in bad_payloads:
        r = client.post(f"{API}/profiles", json=payload, headers=user_headers)
        assert r.status_code == 422, payload
        assert r.json()["success"] is False


def test_mobile_numbers_accept_json_string(client, user_headers):
    uuid = make_profile(client, user_headers, "Json", mobileNumbers='["+44 20 7946 0958"]')
    profile = client.get(f"{API}/profiles/{uuid}", headers=user_headers).json()["profile"]
    assert profile["mobile_numbers"] == ["+44 20 7946 0958"]
