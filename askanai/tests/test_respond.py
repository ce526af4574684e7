import pytest

SURVEY_QUESTIONS = [
    {"type": "single_choice", "prompt": "Colour?", "options": ["Red", "Blue"], "isRequired": True},
    {"type": "multiple_choice", "prompt": "Fruit?", "options": ["Apple", "Pear", "Plum"]},
    {"type": "rating", "prompt": "Rate us", "settingsJson": {"scale": 4}},
    {"type": "nps", "prompt": "Recommend?"},
    {"type": "emoji", "prompt": "Mood?"},
    {"type": "short_text", "prompt": "Anything else?"},
    {"type": "ranking", "prompt": "Order these", "options": ["X", "Y"]},
]


async def question_ids(client, poll_id):
    """Question ids in declared order, as a respondent would read them."""
    response = await client.get(f"/polls/{poll_id}")
    return [question["id"] for question in response.json()["poll"]["questions"]]


async def test_three_votes_results(client, create_poll, voter):
    body = await create_poll()
    poll_id = body["poll"]["id"]
    [question_id] = await question_ids(client, poll_id)

    for n, label in enumerate(["A", "A", "B"]):
        response = await client.post(f"/polls/{poll_id}/respond", json={"answers": {question_id: label}},
                                     headers=voter(n))
        assert response.status_code == 200, response.text
        assert response.json()["success"] is True

    response = await client.get(f"/polls/{poll_id}/results")
    assert response.json() == {
        "responseCount": 3,
        "resultsByQuestionId": {question_id: [
            {"label": "A", "count": 2, "percent": 67},
            {"label": "B", "count": 1, "percent": 33},
        ]},
    }


async def test_every_question_type(client, create_poll, voter):
    body = await create_poll(questions=SURVEY_QUESTIONS)
    poll_id = body["poll"]["id"]
    ids = await question_ids(client, poll_id)

    answers = {
        ids[0]: "Blue",
        ids[1]: ["Apple", "Plum"],
        ids[2]: 3,
        ids[3]: 9,
        ids[4]: "😊",
        ids[5]: "Keep it up",
        ids[6]: ["Y", "X"],
    }
    response = await client.post(f"/polls/{poll_id}/respond",
                                 json={"answers": answers, "respondentName": "x" * 150}, headers=voter(1))
    assert response.status_code == 200, response.text
    assert response.json()["response"]["respondent_name"] == "x" * 100

    results = (await client.get(f"/polls/{poll_id}/results")).json()["resultsByQuestionId"]
    assert results[ids[0]][1] == {"label": "Blue", "count": 1, "percent": 100}
    assert [item["count"] for item in results[ids[1]]] == [1, 0, 1]
    assert results[ids[2]] == {"average": "3.0", "scale": 4, "distribution": [0, 0, 100, 0]}
    assert results[ids[3]] == {"npsScore": 100, "detractors": 0, "passives": 0, "promoters": 100}
    assert {"emoji": "😊", "count": 1, "percent": 100} in results[ids[4]]
    assert results[ids[5]] is None
    assert results[ids[6]] is None


@pytest.mark.parametrize("index, value", [
    (0, "Green"),
    (1, []),
    (1, ["Apple", "Apple"]),
    (2, 5),
    (2, 2.5),
    (3, 11),
    (4, "🦄"),
    (5, ""),
    (6, ["Z"]),
])
async def test_invalid_answer_values(client, create_poll, index, value):
    body = await create_poll(questions=SURVEY_QUESTIONS)
    poll_id = body["poll"]["id"]
    ids = await question_ids(client, poll_id)

    answers = {ids[0]: "Red"}
    answers[ids[index]] = value
    response = await client.post(f"/polls/{poll_id}/respond", json={"answers": answers})

    assert response.status_code == 400
    assert response.json() == {"error": "INVALID_ANSWERS"}


async def test_required_question_must_be_answered(client, create_poll):
    body = await create_poll(questions=SURVEY_QUESTIONS)
    poll_id = body["poll"]["id"]
    ids = await question_ids(client, poll_id)

    response = await client.post(f"/polls/{poll_id}/respond", json={"answers": {ids[3]: 7}})

    assert response.json() == {"error": "INVALID_ANSWERS"}


async def test_unknown_question_id(client, create_poll):
    body = await create_poll()
    poll_id = body["poll"]["id"]
    [question_id] = await question_ids(client, poll_id)

    response = await client.post(f"/polls/{poll_id}/respond",
                                 json={"answers": {question_id: "A", "not-a-question": "A"}})

    assert response.json() == {"error": "INVALID_ANSWERS"}


async def test_answers_must_be_an_object(client, create_poll):
    body = await create_poll()
    response = await client.post(f"/polls/{body['poll']['id']}/respond", json={"answers": ["A"]})
    assert response.status_code == 400
    assert response.json() == {"error": "INVALID_ANSWERS"}


async def test_second_vote_from_same_ip(client, create_poll, voter):
    body = await create_poll()
    poll_id = body["poll"]["id"]
    [question_id] = await question_ids(client, poll_id)

    first = await client.post(f"/polls/{poll_id}/respond", json={"answers": {question_id: "A"}}, headers=voter(1))
    second = await client.post(f"/polls/{poll_id}/respond", json={"answers": {question_id: "B"}}, headers=voter(1))

    assert first.status_code == 200
    assert second.status_code == 409
    assert second.json() == {"error": "ALREADY_VOTED"}
    results = (await client.get(f"/polls/{poll_id}/results")).json()
    assert results["responseCount"] == 1


async def test_has_voted(client, create_poll, voter):
    body = await create_poll()
    poll_id = body["poll"]["id"]
    [question_id] = await question_ids(client, poll_id)

    response = await client.get(f"/polls/{poll_id}/has-voted", headers=voter(1))
    assert response.json() == {"hasVoted": False}

    await client.post(f"/polls/{poll_id}/respond", json={"answers": {question_id: "A"}}, headers=voter(1))

    response = await client.get(f"/polls/{poll_id}/has-voted", headers=voter(1))
    assert response.json() == {"hasVoted": True}
    response = await client.get(f"/polls/{poll_id}/has-voted", headers=voter(2))
    assert response.json() == {"hasVoted": False}


async def test_closed_poll_rejects_votes(client, create_poll):
    body = await create_poll()
    poll_id = body["poll"]["id"]
    [question_id] = await question_ids(client, poll_id)
    await client.patch(f"/polls/{poll_id}", json={"status": "closed"},
                       headers={"X-Creator-Key": body["creatorKey"]})

    response = await client.post(f"/polls/{poll_id}/respond", json={"answers": {question_id: "A"}})

    assert response.status_code == 403
    assert response.json() == {"error": "POLL_CLOSED"}


async def test_voters_only_results(client, create_poll, voter):
    body = await create_poll(settings={"visibility": "voters"})
    slug = body["poll"]["slug"]

    # a voter finds the poll by its slug, with no creator key
    poll = (await client.get(f"/polls/by-slug/{slug}", headers=voter(1))).json()["poll"]
    poll_id = poll["id"]
    [question] = poll["questions"]

    response = await client.get(f"/polls/{poll_id}/results", headers=voter(1))
    assert response.status_code == 403
    assert response.json() == {"error": "GIVE_TO_GET_REQUIRED"}

    response = await client.post(f"/polls/{poll_id}/respond",
                                 json={"answers": {question["id"]: question["options"][0]["label"]}},
                                 headers=voter(1))
    assert response.status_code == 200

    response = await client.get(f"/polls/{poll_id}/results", headers=voter(1))
    assert response.status_code == 200
    assert response.json()["responseCount"] == 1
    assert response.json()["resultsByQuestionId"][question["id"]][0] == {"label": "A", "count": 1, "percent": 100}

    # the owner always sees results
    owner = await client.get(f"/polls/{poll_id}/results", headers={"X-Creator-Key": body["creatorKey"]})
    assert owner.status_code == 200


@pytest.mark.parametrize("settings", [{"visibility": "private"}, {"status": "draft"}])
async def test_hidden_polls_look_missing(client, create_poll, settings):
    body = await create_poll(settings=settings)
    poll_id = body["poll"]["id"]

    response = await client.get(f"/polls/{poll_id}/results")
    assert response.status_code == 404
    assert response.json() == {"error": "NOT_FOUND"}

    response = await client.get(f"/polls/{poll_id}/results", headers={"X-Creator-Key": body["creatorKey"]})
    assert response.status_code == 200


async def test_results_are_stable_between_reads(client, create_poll, voter):
    body = await create_poll(questions=SURVEY_QUESTIONS)
    poll_id = body["poll"]["id"]
    ids = await question_ids(client, poll_id)
    for n, (colour, rating, score) in enumerate([("Red", 4, 10), ("Blue", 1, 3), ("Red", 2, 7)]):
        await client.post(f"/polls/{poll_id}/respond",
                          json={"answers": {ids[0]: colour, ids[2]: rating, ids[3]: score}}, headers=voter(n))

    first = await client.get(f"/polls/{poll_id}/results")
    second = await client.get(f"/polls/{poll_id}/results")

    assert first.status_code == 200
    assert first.json() == second.json()
    assert first.json()["responseCount"] == 3
