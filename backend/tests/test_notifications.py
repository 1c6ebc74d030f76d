import asyncio

import pytest
from conftest import apply
from starlette.websockets import WebSocketDisconnect

from jobnest.models.notification import Notification
from jobnest.services.notifications import NotificationHub, notification_service, room_for, status_message


def test_status_message_templates():
    assert status_message("accepted") == "Congratulations! Your application has been accepted."
    assert status_message("rejected") == "We regret to inform you that your application has been rejected."
    assert status_message("on_hold") == "Your application status has been updated to on_hold."
    assert room_for(12) == "user_12"


def test_hub_delivers_only_to_matching_room():
    async def scenario():
        hub = NotificationHub()
        subscription = hub.subscribe(5)
        assert hub.subscriber_count(5) == 1
        assert hub.publish(5, {"event": "newNotification", "n": 1}) == 1
        assert hub.publish(6, {"event": "newNotification", "n": 2}) == 0
        payload = await asyncio.wait_for(subscription.queue.get(), timeout=1)
        hub.unsubscribe(subscription)
        assert hub.subscriber_count(5) == 0
        assert hub.publish(5, {"event": "newNotification"}) == 0
        return payload

    assert asyncio.run(scenario()) == {"event": "newNotification", "n": 1}


def test_create_and_list_notifications(client, seeker, company_owner):
    created = client.post(
        "/api/notification/create",
        json={"user_id": seeker["user"]["id"], "message": "Welcome aboard"},
        headers=company_owner["headers"],
    )
    assert created.status_code == 201
    assert created.json()["notification"]["is_read"] is False

    missing_user = client.post(
        "/api/notification/create",
        json={"user_id": 9999, "message": "Hello?"},
        headers=company_owner["headers"],
    )
    assert missing_user.status_code == 404

    inbox = client.get("/api/notification/user", headers=seeker["headers"]).json()
    assert inbox["count"] == 1
    assert inbox["unread"] == 1
    assert inbox["notifications"][0]["message"] == "Welcome aboard"


def test_mark_read_and_delete_check_ownership(client, db, seeker, company_owner):
    notification_id = client.post(
        "/api/notification/create",
        json={"user_id": seeker["user"]["id"], "message": "Ping"},
        headers=company_owner["headers"],
    ).json()["notification"]["id"]

    foreign = client.put(
        "/api/notification/read",
        json={"notification_id": notification_id},
        headers=company_owner["headers"],
    )
    assert foreign.status_code == 404

    read = client.put("/api/notification/read", json={"notification_id": notification_id}, headers=seeker["headers"])
    assert read.status_code == 200
    assert read.json()["notification"]["is_read"] is True

    foreign_delete = client.request(
        "DELETE",
        "/api/notification/delete",
        json={"notification_id": notification_id},
        headers=company_owner["headers"],
    )
    assert foreign_delete.status_code == 404

    deleted = client.request(
        "DELETE",
        "/api/notification/delete",
        json={"notification_id": notification_id},
        headers=seeker["headers"],
    )
    assert deleted.status_code == 200
    assert db.query(Notification).count() == 0


def test_mark_all_read_is_scoped_to_caller(client, db, seeker, company_owner):
    for message in ("one", "two"):
        client.post(
            "/api/notification/create",
            json={"user_id": seeker["user"]["id"], "message": message},
            headers=company_owner["headers"],
        )
    client.post(
        "/api/notification/create",
        json={"user_id": company_owner["user"]["id"], "message": "owner only"},
        headers=company_owner["headers"],
    )

    response = client.put("/api/notification/read-all", headers=seeker["headers"])
    assert response.status_code == 200
    assert response.json()["updated"] == 2

    owner_inbox = client.get("/api/notification/user", headers=company_owner["headers"]).json()
    assert owner_inbox["unread"] == 1


def test_websocket_receives_status_change(client, company_owner, job, seeker):
    application_id = apply(client, seeker, job["id"]).json()["application"]["id"]

    with client.websocket_connect(f"/api/notification/ws?token={seeker['token']}") as websocket:
        assert notification_service.hub.subscriber_count(seeker["user"]["id"]) == 1
        response = client.put(
            f"/api/applications/{application_id}/status",
            json={"status": "accepted"},
            headers=company_owner["headers"],
        )
        assert response.status_code == 200

        event = websocket.receive_json()
        assert event["event"] == "newNotification"
        assert event["notification"]["user_id"] == seeker["user"]["id"]
        assert event["notification"]["message"] == "Congratulations! Your application has been accepted."


def test_websocket_rejects_bad_token(client):
    with pytest.raises(WebSocketDisconnect) as excinfo:
        with client.websocket_connect("/api/notification/ws?token=not-a-jwt"):
            pass
    assert excinfo.value.code == 1008
