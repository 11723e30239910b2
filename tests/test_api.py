"""Endpoint tests through the FastAPI TestClient.

Each test runs against a fresh in-memory database shared with the
``session`` fixture, so assertions can inspect rows directly.
"""

from sqlmodel import Session, select

from certivo.db.schema import (
    ActivityType, Certificate, CertificateActivity, CertificateStatus,
    Organization, User, UserRole
)


ISSUE_URL = "/api/v1/admin/certificates/"
IMPORT_URL = "/api/v1/admin/certificates/import"
VERIFY_URL = "/api/v1/verify/"

CSV_CONTENT = (
    b"Name,Email,Program,OrganizationName\n"
    b"Ann,ann@example.com,Data,Acme University\n"
    b",bob@example.com,Data,\n"
    b"Cid,cid@example.com,Web Development,\n"
)


def _issue(client, headers, **payload):
    body = {"name": "Jane Doe", "domain": "Web Development", "issued_at": "2025-03-15"}
    body.update(payload)
    return client.post(ISSUE_URL, json=body, headers=headers)


class TestIndex:

    def test_root(self, client) -> None:
        response = client.get("/api/v1/")
        assert response.status_code == 200
        assert response.json() == {"status": "Certivo API is running"}

    def test_readiness(self, client) -> None:
        response = client.get("/api/v1/readiness")
        assert response.status_code == 200
        assert response.json()["database"] == "online"


class TestIssueEndpoint:

    def test_requires_token(self, client) -> None:
        response = _issue(client, headers={})
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_rejects_garbage_token(self, client) -> None:
        response = _issue(client, headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_requires_admin_role(self, client, make_user, auth_headers) -> None:
        holder = make_user(email="jane@example.com")
        response = _issue(client, auth_headers(holder))
        assert response.status_code == 403

    def test_deactivated_admin_is_forbidden(self, client, make_user, auth_headers) -> None:
        inactive = make_user(email="old@certivo.local", role=UserRole.ADMIN, is_active=False)
        response = _issue(client, auth_headers(inactive))
        assert response.status_code == 403

    def test_issues_certificate(self, client, session: Session, admin: User,
                                organization: Organization, auth_headers) -> None:
        response = _issue(client, auth_headers(admin), organization_id=organization.id)

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Certificate issued successfully."
        assert body["certificate"]["code"].startswith("CERT-INT-")
        assert body["certificate"]["organization_name"] == "Acme University"
        assert body["certificate"]["status"] == "verified"
        assert len(session.exec(select(Certificate)).all()) == 1

    def test_missing_fields_is_400(self, client, admin: User, auth_headers) -> None:
        response = client.post(ISSUE_URL, json={"name": "Jane"}, headers=auth_headers(admin))

        assert response.status_code == 400
        assert response.json()["detail"] == "Name, domain, and issued date are required."

    def test_unknown_organization_is_404(self, client, admin: User, auth_headers) -> None:
        response = _issue(client, auth_headers(admin), organization_id=404)
        assert response.status_code == 404


class TestImportEndpoint:

    def test_csv_import_reports_row_errors(self, client, session: Session,
                                           admin: User, organization: Organization,
                                           auth_headers) -> None:
        response = client.post(
            IMPORT_URL,
            files={"file": ("interns.csv", CSV_CONTENT, "text/csv")},
            headers=auth_headers(admin),
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Import completed."
        assert body["summary"] == {
            "total_rows": 3,
            "created_users": 2,
            "existing_users": 0,
            "created_certificates": 2,
            "error_count": 1,
        }
        assert body["errors"] == ["Row 3: Name, Email and Program are required."]

        activities = session.exec(select(CertificateActivity)).all()
        assert {a.activity_type for a in activities} == {ActivityType.IMPORTED}
        assert len(activities) == 2

    def test_non_admin_persists_nothing(self, client, session: Session,
                                        make_user, auth_headers) -> None:
        holder = make_user(email="jane@example.com")

        response = client.post(
            IMPORT_URL,
            files={"file": ("interns.csv", CSV_CONTENT, "text/csv")},
            headers=auth_headers(holder),
        )

        assert response.status_code == 403
        assert session.exec(select(Certificate)).all() == []
        assert len(session.exec(select(User)).all()) == 1

    def test_header_only_sheet_is_400(self, client, admin: User, auth_headers) -> None:
        response = client.post(
            IMPORT_URL,
            files={"file": ("interns.csv", b"Name,Email,Program\n", "text/csv")},
            headers=auth_headers(admin),
        )
        assert response.status_code == 400

    def test_unsupported_extension_is_400(self, client, admin: User, auth_headers) -> None:
        response = client.post(
            IMPORT_URL,
            files={"file": ("interns.pdf", b"%PDF-1.4", "application/pdf")},
            headers=auth_headers(admin),
        )
        assert response.status_code == 400


class TestVerifyEndpoint:

    def test_miss_is_a_normal_answer(self, client) -> None:
        response = client.get(VERIFY_URL, params={"code": "CERT-INT-2025-999999"})

        assert response.status_code == 200
        body = response.json()
        assert body["found"] is False
        assert "certificate" not in body
        assert body["message"].startswith("No certificate found")

    def test_missing_code_is_400(self, client) -> None:
        assert client.get(VERIFY_URL).status_code == 400

    def test_hit_without_authentication(self, client, session: Session,
                                        admin: User, auth_headers) -> None:
        code = _issue(client, auth_headers(admin)).json()["certificate"]["code"]

        response = client.get(VERIFY_URL, params={"code": code.lower()})

        assert response.status_code == 200
        body = response.json()
        assert body["found"] is True
        assert body["certificate"]["code"] == code
        assert body["certificate"]["verified_at"] is not None
        assert body["public_portal"]["public_lookup_enabled"] is True

        cert = session.exec(select(Certificate).where(Certificate.code == code)).one()
        assert cert.verified_at is not None
        assert cert.status == CertificateStatus.VERIFIED

    def test_redaction_follows_portal_settings(self, client, admin: User,
                                               organization: Organization, auth_headers) -> None:
        headers = auth_headers(admin)
        code = _issue(client, headers, organization_id=organization.id).json()["certificate"]["code"]

        patch_response = client.patch(
            "/api/v1/admin/settings/public-portal",
            json={"show_org_name_on_public": False},
            headers=headers,
        )
        assert patch_response.json()["message"] == "Public portal settings updated."

        body = client.get(VERIFY_URL, params={"code": code}).json()
        assert "organization_name" not in body["certificate"]

    def test_disabled_lookup_is_403(self, client, admin: User, auth_headers) -> None:
        client.patch(
            "/api/v1/admin/settings/public-portal",
            json={"public_lookup_enabled": False},
            headers=auth_headers(admin),
        )

        response = client.get(VERIFY_URL, params={"code": "CERT-INT-2025-000001"})
        assert response.status_code == 403

    def test_qr_for_unknown_code_is_404(self, client) -> None:
        assert client.get("/api/v1/verify/CERT-INT-2025-000000/qr").status_code == 404


class TestSettingsEndpoints:

    def test_defaults(self, client, admin: User, auth_headers) -> None:
        response = client.get("/api/v1/admin/settings/verification", headers=auth_headers(admin))

        assert response.status_code == 200
        assert response.json() == {
            "auto_verify_imports": True,
            "require_review_for_manual": False,
            "lock_status_after_download": False,
        }

    def test_empty_patch_changes_nothing(self, client, admin: User, auth_headers) -> None:
        response = client.patch(
            "/api/v1/admin/settings/verification", json={}, headers=auth_headers(admin))

        assert response.status_code == 200
        assert response.json()["message"] == "No changes provided."
        assert response.json()["settings"]["auto_verify_imports"] is True

    def test_partial_patch(self, client, admin: User, auth_headers) -> None:
        response = client.patch(
            "/api/v1/admin/settings/verification",
            json={"require_review_for_manual": True},
            headers=auth_headers(admin),
        )

        settings = response.json()["settings"]
        assert settings["require_review_for_manual"] is True
        assert settings["auto_verify_imports"] is True

    def test_admin_only(self, client, make_user, auth_headers) -> None:
        holder = make_user(email="jane@example.com")
        response = client.get("/api/v1/admin/settings/public-portal", headers=auth_headers(holder))
        assert response.status_code == 403


class TestOrganizationEndpoints:

    def test_create_and_duplicate(self, client, admin: User, auth_headers) -> None:
        headers = auth_headers(admin)
        payload = {"name": "  Zidio Development ", "type": "company"}

        created = client.post("/api/v1/admin/organizations/", json=payload, headers=headers)
        duplicate = client.post("/api/v1/admin/organizations/", json=payload, headers=headers)

        assert created.status_code == 201
        assert created.json()["name"] == "Zidio Development"
        assert created.json()["type"] == "company"
        assert created.json()["total_certificates"] == 0
        assert duplicate.status_code == 409

    def test_unknown_type_becomes_other(self, client, admin: User, auth_headers) -> None:
        response = client.post(
            "/api/v1/admin/organizations/",
            json={"name": "Guild", "type": "guild"},
            headers=auth_headers(admin),
        )
        assert response.json()["type"] == "other"

    def test_get_counts_certificates(self, client, admin: User,
                                     organization: Organization, auth_headers) -> None:
        headers = auth_headers(admin)
        _issue(client, headers, organization_id=organization.id)
        _issue(client, headers, organization_id=organization.id, name="John Roe")

        response = client.get(f"/api/v1/admin/organizations/{organization.id}", headers=headers)

        assert response.status_code == 200
        assert response.json()["total_certificates"] == 2

    def test_get_unknown(self, client, admin: User, auth_headers) -> None:
        response = client.get("/api/v1/admin/organizations/999", headers=auth_headers(admin))
        assert response.status_code == 404


class TestHolderEndpoint:

    def test_own_certificate(self, client, session: Session, admin: User,
                             make_user, auth_headers) -> None:
        holder = make_user(email="jane@example.com", name="Jane Doe")
        _issue(client, auth_headers(admin), email="jane@example.com")
        cert = session.exec(select(Certificate)).one()

        response = client.get(f"/api/v1/me/certificates/{cert.id}", headers=auth_headers(holder))

        assert response.status_code == 200
        assert response.json()["id"] == cert.id
        assert response.json()["code"] == cert.code

    def test_someone_elses_certificate_is_404(self, client, session: Session, admin: User,
                                              make_user, auth_headers) -> None:
        make_user(email="jane@example.com")
        other = make_user(email="john@example.com", name="John")
        _issue(client, auth_headers(admin), email="jane@example.com")
        cert = session.exec(select(Certificate)).one()

        response = client.get(f"/api/v1/me/certificates/{cert.id}", headers=auth_headers(other))

        assert response.status_code == 404
