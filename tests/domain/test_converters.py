from __future__ import annotations

from datetime import UTC, datetime

import pytest

from intune_graph.domain.converters import (
    UNVERSIONED,
    create_compliance_policy_state_entity,
    create_detected_application_entity,
    create_host_agent_entity,
    create_managed_application_entity,
    create_managed_device_entity,
    create_user_entity,
    find_newest_version,
    is_line_of_business,
    is_mobile,
    parse_time_property,
)
from intune_graph.domain.model import EntityClass, EntityType
from intune_graph.domain.records import (
    AndroidLobAppRecord,
    AndroidManagedStoreAppRecord,
    CompliancePolicyStateRecord,
    IosLobAppRecord,
    MacOSLobAppRecord,
    ManagedAppRecord,
    MobileLobAppRecord,
    WebAppRecord,
    WindowsAppXRecord,
    WindowsPhoneXapRecord,
    WindowsUniversalAppXRecord,
    parse_managed_app,
)
from tests.helpers.intune import DESKTOP_ID, PHONE_ID, make_detected_app, make_device, make_user


def test_conversion_is_deterministic() -> None:
    device = make_device(enrolled_date_time=datetime(2024, 5, 1, tzinfo=UTC))

    assert create_managed_device_entity(device).to_dict() == create_managed_device_entity(
        device
    ).to_dict()


@pytest.mark.parametrize(
    ("app", "expected"),
    [
        (
            AndroidLobAppRecord(
                id="app-0000000001", version_name="1.2.3", version_code="42", version="9"
            ),
            "1.2.3",
        ),
        (AndroidLobAppRecord(id="app-0000000002", version_code="42"), "42"),
        (IosLobAppRecord(id="app-0000000003", version_number="7.0"), "7.0"),
        (WindowsPhoneXapRecord(id="app-0000000004", identity_version="3.1"), "3.1"),
        (ManagedAppRecord(id="app-0000000005", version="5"), "5"),
        (ManagedAppRecord(id="app-0000000006"), UNVERSIONED),
    ],
)
def test_find_newest_version(app: ManagedAppRecord, expected: str) -> None:
    assert find_newest_version(app) == expected


@pytest.mark.parametrize(
    ("payload", "record_type", "expected"),
    [
        (
            {
                "id": "app-0000000020",
                "@odata.type": "#microsoft.graph.windowsAppX",
                "identityVersion": "4.2.0.0",
            },
            WindowsAppXRecord,
            "4.2.0.0",
        ),
        (
            {
                "id": "app-0000000021",
                "@odata.type": "#microsoft.graph.windowsUniversalAppX",
                "identityVersion": "1.0.0.0",
            },
            WindowsUniversalAppXRecord,
            "1.0.0.0",
        ),
        (
            {
                "id": "app-0000000022",
                "@odata.type": "#microsoft.graph.macOSLobApp",
                "versionNumber": "12.1",
            },
            MacOSLobAppRecord,
            "12.1",
        ),
        (
            {"id": "app-0000000023", "versionName": "2.1.0", "versionCode": "210"},
            ManagedAppRecord,
            "2.1.0",
        ),
        (
            {
                "id": "app-0000000024",
                "@odata.type": "#microsoft.graph.win32LobApp",
                "versionCode": "88",
            },
            MobileLobAppRecord,
            "88",
        ),
    ],
)
def test_version_found_on_parsed_payloads(
    payload: dict[str, object], record_type: type[ManagedAppRecord], expected: str
) -> None:
    app = parse_managed_app(payload)

    assert type(app) is record_type
    assert find_newest_version(app) == expected
    assert create_managed_application_entity(app).get("version") == expected


@pytest.mark.parametrize(
    ("discriminator", "line_of_business", "mobile"),
    [
        ("#microsoft.graph.webApp", False, True),
        ("#microsoft.graph.androidLobApp", True, True),
        ("#microsoft.graph.iosStoreApp", False, True),
        ("#microsoft.graph.win32LobApp", True, False),
        ("#microsoft.graph.windowsMobileMSI", False, True),
        ("#microsoft.graph.microsoftStoreForBusinessApp", False, False),
        (None, False, False),
    ],
)
def test_discriminator_classification(
    discriminator: str | None, line_of_business: bool, mobile: bool
) -> None:
    assert is_line_of_business(discriminator) is line_of_business
    assert is_mobile(discriminator) is mobile


def test_parse_managed_app_dispatches_on_discriminator() -> None:
    web_app = parse_managed_app(
        {
            "id": "app-0000000010",
            "@odata.type": "#microsoft.graph.webApp",
            "displayName": "Portal",
            "appUrl": "https://portal.example.com",
        }
    )
    unknown = parse_managed_app({"id": "app-0000000011", "@odata.type": "#microsoft.graph.newApp"})

    assert isinstance(web_app, WebAppRecord)
    assert web_app.app_url == "https://portal.example.com"
    assert type(unknown) is ManagedAppRecord


def test_managed_application_entity_properties() -> None:
    app = AndroidManagedStoreAppRecord(
        id="app-0000000020",
        odata_type="#microsoft.graph.androidManagedStoreApp",
        display_name="Slack",
        package_id="com.slack",
        app_store_url="https://play.google.com/store/apps/details?id=com.slack",
        publishing_state="published",
        notes="rolled out to sales",
    )

    entity = create_managed_application_entity(app)

    assert entity.type == EntityType.MANAGED_APPLICATION
    assert entity.classes == (EntityClass.APPLICATION,)
    assert entity.get("name") == "slack"
    assert entity.get("COTS") is True
    assert entity.get("mobile") is True
    assert entity.get("isPublished") is True
    assert entity.get("packageId") == "com.slack"
    assert entity.get("productionURL") == app.app_store_url
    assert entity.get("notes") == ["rolled out to sales"]
    assert entity.get("version") == UNVERSIONED
    assert entity.raw_data is not None
    assert entity.raw_data["@odata.type"] == "#microsoft.graph.androidManagedStoreApp"


def test_detected_application_entity_carries_no_detection_specifics() -> None:
    entity = create_detected_application_entity(
        make_detected_app("detection-a", "Slack", version="4.1", publisher="Slack Inc")
    )

    assert entity.get("name") == "slack"
    assert entity.get("displayName") == "Slack"
    assert "id" not in entity.properties
    assert entity.raw_data is None


def test_desktop_devices_are_user_endpoints() -> None:
    desktop = create_managed_device_entity(make_device(DESKTOP_ID, operating_system="Windows"))
    phone = create_managed_device_entity(make_device(PHONE_ID, operating_system="iOS"))
    windows_phone = create_managed_device_entity(
        make_device("dddddddd-0000-0000-0000-000000000003", operating_system="Windows Mobile")
    )

    assert desktop.type == EntityType.USER_ENDPOINT
    assert desktop.classes == (EntityClass.DEVICE, EntityClass.HOST)
    assert phone.type == EntityType.MANAGED_DEVICE
    assert phone.classes == (EntityClass.DEVICE,)
    assert windows_phone.type == EntityType.MANAGED_DEVICE


def test_device_entity_drops_absent_fields_and_keeps_raw_data() -> None:
    entity = create_managed_device_entity(make_device(serial_number=None))

    assert "serial" not in entity.properties
    assert entity.get("compliant") is True
    assert entity.raw_data is not None
    assert entity.raw_data["id"] == DESKTOP_ID


def test_host_agent_entity() -> None:
    agent = create_host_agent_entity(make_device())

    assert agent.type == EntityType.HOST_AGENT
    assert agent.key != DESKTOP_ID
    assert agent.get("function") == ["endpoint-configuration", "endpoint-compliance"]


def test_user_entity_lowercases_email() -> None:
    entity = create_user_entity(make_user())

    assert entity.get("email") == "ada@example.com"


@pytest.mark.parametrize(
    ("state", "compliant", "open_finding"),
    [
        ("compliant", True, False),
        ("nonCompliant", False, True),
        ("inGracePeriod", False, True),
        ("notApplicable", False, False),
    ],
)
def test_policy_state_finding(state: str, compliant: bool, open_finding: bool) -> None:
    entity = create_compliance_policy_state_entity(
        CompliancePolicyStateRecord(id="policy-0000000001", state=state),
        device_id=DESKTOP_ID,
    )

    assert entity.classes == (EntityClass.FINDING,)
    assert entity.get("compliant") is compliant
    assert entity.get("open") is open_finding
    assert entity.get("deviceId") == DESKTOP_ID


def test_parse_time_property() -> None:
    assert parse_time_property("2024-01-01T00:00:00Z") == 1704067200000
    assert parse_time_property(datetime(2024, 1, 1)) == 1704067200000  # noqa: DTZ001
    assert parse_time_property("not a date") is None
    assert parse_time_property(None) is None
