import uuid


async def test_comment_and_list(client, create_poll, voter):
    body = await create_poll()
    poll_id = body["poll"]["id"]

    first = await client.post(f"/polls/{poll_id}/comment", json={"body": "  first  ", "displayName": "Ann"},
                              headers=voter(1))
    second = await client.post(f"/polls/{poll_id}/comment", json={"body": "second"}, headers=voter(2))

    assert first.status_code == 200
    assert first.json()["comment"]["body"] == "first"
    assert first.json()["comment"]["display_name"] == "Ann"
    assert second.json()["comment"]["display_name"] is None

    response = await client.get(f"/polls/{poll_id}/comments")
    comments = response.json()["comments"]
    assert {comment["body"] for comment in comments} == {"first", "second"}
    # moderation fields stay internal
    assert "ip_hash" not in comments[0]
    assert "status" not in comments[0]


async def test_duplicate_comment(client, create_poll, voter):
    body = await create_poll()
    poll_id = body["poll"]["id"]

    await client.post(f"/polls/{poll_id}/comment", json={"body": "Nice poll"}, headers=voter(1))
    response = await client.post(f"/polls/{poll_id}/comment", json={"body": "  nice   POLL "}, headers=voter(1))

    assert response.status_code == 409
    assert response.json() == {"error": "DUPLICATE_COMMENT"}

    # another ip may say the same thing
    response = await client.post(f"/polls/{poll_id}/comment", json={"body": "Nice poll"}, headers=voter(2))
    assert response.status_code == 200


async def test_comment_validation(client, create_poll):
    body = await create_poll()
    poll_id = body["poll"]["id"]

    response = await client.post(f"/polls/{poll_id}/comment", json={"body": "   "})
    assert response.json() == {"error": "INVALID_COMMENT"}

    response = await client.post(f"/polls/{poll_id}/comment", json={"body": "ok", "displayName": "n" * 101})
    assert response.json() == {"error": "INVALID_DISPLAY_NAME"}


async def test_comments_disabled(client, create_poll):
    body = await create_poll(settings={"visibility": "public", "allowComments": False})

    response = await client.post(f"/polls/{body['poll']['id']}/comment", json={"body": "hello"})

    assert response.status_code == 403
    assert response.json() == {"error": "COMMENTS_DISABLED"}


async def test_comments_on_closed_poll(client, create_poll):
    body = await create_poll()
    poll_id = body["poll"]["id"]
    await client.patch(f"/polls/{poll_id}", json={"status": "closed"}, headers={"X-Creator-Key": body["creatorKey"]})

    response = await client.post(f"/polls/{poll_id}/comment", json={"body": "hello"})

    assert response.json() == {"error": "COMMENTS_DISABLED"}


async def test_report_poll(client, create_poll, voter):
    body = await create_poll()
    poll_id = body["poll"]["id"]

    response = await client.post(f"/polls/{poll_id}/report", json={"type": "spam", "message": "ads"},
                                 headers=voter(1))
    assert response.status_code == 200
    assert response.json() == {"ok": True}

    response = await client.post(f"/polls/{poll_id}/report", json={"type": "SPAM", "message": " ADS "},
                                 headers=voter(1))
    assert response.status_code == 409
    assert response.json() == {"error": "DUPLICATE_REPORT"}


async def test_report_a_comment(client, create_poll):
    body = await create_poll()
    poll_id = body["poll"]["id"]
    comment = (await client.post(f"/polls/{poll_id}/comment", json={"body": "rude"})).json()["comment"]

    response = await client.post(f"/polls/{poll_id}/report", json={"type": "abuse", "commentId": comment["id"]})

    assert response.json() == {"ok": True}


async def test_report_validation(client, create_poll):
    body = await create_poll()
    poll_id = body["poll"]["id"]

    response = await client.post(f"/polls/{poll_id}/report", json={"type": ""})
    assert response.json() == {"error": "INVALID_TYPE"}

    response = await client.post(f"/polls/{poll_id}/report", json={"type": "spam", "message": "m" * 5001})
    assert response.json() == {"error": "INVALID_MESSAGE"}

    response = await client.post(f"/polls/{poll_id}/report", json={"type": "spam", "commentId": "nope"})
    assert response.json() == {"error": "INVALID_COMMENT_ID"}


async def test_report_missing_poll(client):
    response = await client.post(f"/polls/{uuid.uuid4()}/report", json={"type": "spam"})
    assert response.status_code == 404


async def test_report_unknown_comment(client, create_poll):
    body = await create_poll()
    response = await client.post(f"/polls/{body['poll']['id']}/report",
                                 json={"type": "abuse", "commentId": str(uuid.uuid4())})
    assert response.status_code == 400
    assert response.json() == {"error": "INVALID_COMMENT_ID"}
