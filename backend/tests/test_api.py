async def test_health(client):
    response = await client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


async def test_unknown_project_returns_404(client):
    response = await client.get("/api/v1/projects/999/routes/R1/path")
    assert response.status_code == 404


async def test_route_path_not_available_yet(client, api_base_url):
    response = await client.get(f"{api_base_url}/routes/R1/path", params={"direction_id": 1})
    assert response.status_code == 200
    body = response.json()
    assert body["available"] is False
    assert body["path"] is None


async def test_route_path_unknown_route(client, api_base_url):
    response = await client.get(f"{api_base_url}/routes/NOPE/path")
    assert response.status_code == 404
    assert response.json()["detail"]["code"] == "NOT_FOUND"


async def test_auto_generate_then_path(client, api_base_url):
    response = await client.post(
        f"{api_base_url}/trips/T1/stop-times/auto-generate",
        json={"start_time": "08:00:00", "time_between_stops_minutes": 5, "dwell_minutes": 1},
    )
    assert response.status_code == 201
    assert [st["arrival_time"] for st in response.json()] == ["08:00:00", "08:06:00", "08:12:00", "08:18:00"]

    response = await client.get(f"{api_base_url}/routes/R1/path")
    assert response.status_code == 200
    path = response.json()["path"]
    assert path["trip_id"] == "T1"
    assert len(path["polyline"]) == 3
    assert [s["stop_id"] for s in path["stops"]] == ["S1", "S2", "S3", "S4"]


async def test_auto_generate_uses_default_options(client, api_base_url):
    response = await client.post(f"{api_base_url}/trips/T1/stop-times/auto-generate")
    assert response.status_code == 201
    assert response.json()[0]["arrival_time"] == "06:00:00"


async def test_auto_generate_without_topology(client, api_base_url):
    response = await client.post(f"{api_base_url}/trips/T9/stop-times/auto-generate", json={})
    assert response.status_code == 422
    assert response.json()["detail"]["code"] == "NO_TOPOLOGY"


async def test_replace_and_list_stop_times(client, api_base_url):
    payload = {
        "stop_times": [
            {"stop_id": "S1", "stop_sequence": 0, "arrival_time": "07:00:00", "departure_time": "07:00:00"},
            {"stop_id": "S2", "stop_sequence": 1, "arrival_time": "07:04:00", "departure_time": "07:05:00"},
        ]
    }
    response = await client.put(f"{api_base_url}/trips/T1/stop-times", json=payload)
    assert response.status_code == 200
    assert response.json() == {"created": 2, "deleted": 0}

    response = await client.get(f"{api_base_url}/trips/T1/stop-times")
    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 2
    assert body["items"][1]["stop_name"] == "Stop S2"

    response = await client.delete(f"{api_base_url}/trips/T1/stop-times")
    assert response.json()["deleted"] == 2


async def test_replace_stop_times_unknown_stop(client, api_base_url):
    payload = {
        "stop_times": [
            {"stop_id": "GHOST", "stop_sequence": 0, "arrival_time": "07:00:00", "departure_time": "07:00:00"},
        ]
    }
    response = await client.put(f"{api_base_url}/trips/T1/stop-times", json=payload)
    assert response.status_code == 400


async def test_frequency_overlap_returns_409(client, api_base_url):
    window = {"trip_id": "T1", "start_time": "06:00:00", "end_time": "09:00:00", "headway_secs": 600}
    response = await client.post(f"{api_base_url}/frequencies", json=window)
    assert response.status_code == 201
    frequency_id = response.json()["id"]

    response = await client.post(
        f"{api_base_url}/frequencies",
        json={**window, "start_time": "08:30:00", "end_time": "10:00:00"},
    )
    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "OVERLAPPING_FREQUENCY"

    response = await client.post(
        f"{api_base_url}/frequencies",
        json={**window, "start_time": "09:00:00", "end_time": "10:00:00"},
    )
    assert response.status_code == 201

    response = await client.patch(f"{api_base_url}/frequencies/{frequency_id}", json={"headway_secs": 300})
    assert response.status_code == 200
    assert response.json()["headway_secs"] == 300

    response = await client.get(f"{api_base_url}/trips/T1/frequencies")
    assert response.json()["total"] == 2

    response = await client.delete(f"{api_base_url}/frequencies/{frequency_id}")
    assert response.status_code == 204


async def test_frequency_bad_headway_returns_400(client, api_base_url):
    response = await client.post(
        f"{api_base_url}/frequencies",
        json={"trip_id": "T1", "start_time": "06:00:00", "end_time": "09:00:00", "headway_secs": 0},
    )
    assert response.status_code == 400


async def test_generate_default_frequencies(client, api_base_url):
    response = await client.post(f"{api_base_url}/trips/T1/frequencies/generate")
    assert response.status_code == 201
    assert [f["headway_secs"] for f in response.json()["items"]] == [600, 900, 600]


async def test_transfer_generation_is_idempotent(client, api_base_url):
    response = await client.post(f"{api_base_url}/transfers/generate", json={})
    assert response.status_code == 200
    assert response.json()["generated"] == 4

    response = await client.post(f"{api_base_url}/transfers/generate")
    assert response.json()["generated"] == 0

    response = await client.get(f"{api_base_url}/stops/S1/transfers")
    body = response.json()
    assert [t["to_stop_id"] for t in body["outgoing"]] == ["S2"]
    assert [t["from_stop_id"] for t in body["incoming"]] == ["S2"]


async def test_transfer_crud(client, api_base_url):
    response = await client.post(f"{api_base_url}/transfers", json={"from_stop_id": "S1", "to_stop_id": "S3"})
    assert response.status_code == 201
    transfer_id = response.json()["id"]

    response = await client.post(f"{api_base_url}/transfers", json={"from_stop_id": "S1", "to_stop_id": "S3"})
    assert response.status_code == 409

    response = await client.patch(f"{api_base_url}/transfers/{transfer_id}", json={"min_transfer_time": 240})
    assert response.json()["min_transfer_time"] == 240

    response = await client.delete(f"{api_base_url}/transfers/{transfer_id}")
    assert response.status_code == 204


async def test_shapes(client, api_base_url):
    response = await client.get(f"{api_base_url}/shapes/SH1")
    assert response.status_code == 200
    assert response.json()["total_points"] == 3

    response = await client.put(
        f"{api_base_url}/shapes/SH1",
        json={"points": [{"shape_pt_lat": 40.0, "shape_pt_lon": -3.0}, {"shape_pt_lat": 40.02, "shape_pt_lon": -3.0}]},
    )
    assert response.status_code == 200
    assert [p["sequence"] for p in response.json()["points"]] == [0, 1]

    response = await client.delete(f"{api_base_url}/shapes/SH1")
    assert response.status_code == 204

    response = await client.get(f"{api_base_url}/shapes/SH1")
    assert response.status_code == 404


async def test_generate_shape_from_route(client, api_base_url):
    response = await client.post(f"{api_base_url}/routes/R1/shapes/generate", json={"direction_id": 1})
    assert response.status_code == 201
    body = response.json()
    assert body["shape_id"].startswith("shape-R1-1-")
    assert body["total_points"] == 4


async def test_route_directions(client, api_base_url):
    response = await client.get(f"{api_base_url}/routes/R1/directions")
    assert response.status_code == 200
    assert response.json()["available_directions"] == [0, 1]
