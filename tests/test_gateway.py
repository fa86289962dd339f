import pytest
from starlette.websockets import WebSocketDisconnect

from gateway.handler import ws_handler
from models.interview import Interview

ANSWERS = [
    "Hoisting moves declarations to the top of their scope.",
    "Arrow functions do not bind their own this.",
    "Map keeps insertion order and allows any key type.",
    "async functions always return a promise.",
    "Event delegation relies on bubbling to a parent element.",
]


def connect(client, token):
    return client.websocket_connect(f"/ws?token={token}")


def test_full_interview_over_websocket(client, token, db):
    with connect(client, token) as ws:
        assert ws.receive_json()["type"] == "connected"

        ws.send_json({"type": "startInterview", "topic": "javascript"})
        started = ws.receive_json()
        assert started["type"] == "interviewStarted"
        first = ws.receive_json()
        assert first == {"type": "nextQuestion", "question": "JavaScript question 1", "questionNumber": 1}

        for number, answer in enumerate(ANSWERS[:4], start=2):
            ws.send_json({"type": "submitAnswer", "previousAnswer": answer})
            assert ws.receive_json() == {"type": "answerFeedback", "signal": "adequate", "feedback": "Good answer!"}
            question = ws.receive_json()
            assert question["type"] == "nextQuestion"
            assert question["questionNumber"] == number

        assert started["sessionId"] in ws_handler.registry

        ws.send_json({"type": "submitAnswer", "previousAnswer": ANSWERS[4]})
        assert ws.receive_json()["type"] == "answerFeedback"
        finished = ws.receive_json()

        assert finished["type"] == "interviewFinished"
        assert finished["status"] == "completed"
        assert finished["overallScore"] == 7
        assert len(finished["transcript"]) == 5

        # Finished sessions ignore further answers; the heartbeat reply comes next
        ws.send_json({"type": "submitAnswer", "previousAnswer": "one more thing"})
        ws.send_json({"type": "heartbeat"})
        assert ws.receive_json() == {"type": "heartbeat_ack", "status": "alive"}
        assert started["sessionId"] not in ws_handler.registry

    record = db.query(Interview).filter(Interview.id == started["sessionId"]).one()
    assert record.status == "completed"
    assert record.score == 7
    assert record.questions_count == 5
    assert len(record.transcript) == 5
    assert record.completed_at is not None


def test_abusive_answer_ends_interview(client, token, db):
    with connect(client, token) as ws:
        ws.receive_json()
        ws.send_json({"type": "startInterview", "topic_name": "Python"})
        session_id = ws.receive_json()["sessionId"]
        ws.receive_json()

        ws.send_json({"type": "submitAnswer", "previousAnswer": "you are stupid"})
        finished = ws.receive_json()
        ws.send_json({"type": "heartbeat"})
        ws.receive_json()

    assert finished["type"] == "interviewFinished"
    assert finished["status"] == "terminated_abuse"
    assert finished["overallScore"] == 0
    assert finished["transcript"] == []

    record = db.query(Interview).filter(Interview.id == session_id).one()
    assert record.status == "terminated_abuse"
    assert record.score == 0


def test_evasive_answer_ends_interview(client, token):
    with connect(client, token) as ws:
        ws.receive_json()
        ws.send_json({"type": "startInterview", "topic_name": "python"})
        ws.receive_json()
        ws.receive_json()

        ws.send_json({"type": "submitAnswer", "previousAnswer": "I want to end this interview"})
        finished = ws.receive_json()
        ws.send_json({"type": "heartbeat"})
        ws.receive_json()

    assert finished["status"] == "terminated_evasion"
    assert finished["overallScore"] == 0


def test_unknown_topic_emits_error(client, token):
    with connect(client, token) as ws:
        ws.receive_json()
        ws.send_json({"type": "startInterview", "topic_name": "cobol"})
        assert ws.receive_json() == {"type": "error", "message": "Topic not found by name"}

        ws.send_json({"type": "startInterview"})
        assert ws.receive_json() == {"type": "error", "message": "Invalid topic_id and no topic_name provided"}


def test_answer_before_start_and_bad_messages(client, token):
    with connect(client, token) as ws:
        ws.receive_json()

        ws.send_json({"type": "submitAnswer", "previousAnswer": "hello there"})
        assert ws.receive_json() == {"type": "error", "message": "Interview has not been started"}

        ws.send_text("{not json")
        assert ws.receive_json() == {"type": "error", "message": "Invalid JSON message"}

        ws.send_json({"type": "dance"})
        assert ws.receive_json()["type"] == "error"


def test_oracle_fault_is_reported_not_fatal(client, token, question_oracle, monkeypatch):
    with connect(client, token) as ws:
        ws.receive_json()
        ws.send_json({"type": "startInterview", "topic_name": "python"})
        ws.receive_json()
        ws.receive_json()

        async def broken(*args):
            raise RuntimeError("unexpected")

        monkeypatch.setattr(question_oracle, "next_question", broken)
        ws.send_json({"type": "submitAnswer", "previousAnswer": ANSWERS[0]})
        assert ws.receive_json()["type"] == "answerFeedback"
        assert ws.receive_json() == {"type": "error", "message": "Failed while submitting answer"}

        ws.send_json({"type": "heartbeat"})
        assert ws.receive_json()["type"] == "heartbeat_ack"


def test_disconnect_evicts_session(client, token):
    with connect(client, token) as ws:
        ws.receive_json()
        ws.send_json({"type": "startInterview", "topic_name": "python"})
        session_id = ws.receive_json()["sessionId"]
        ws.receive_json()
        ws.send_json({"type": "heartbeat"})
        ws.receive_json()
        assert session_id in ws_handler.registry

    assert session_id not in ws_handler.registry
    assert ws_handler.connection_sessions == {}


def test_rejects_invalid_token(client):
    with pytest.raises(WebSocketDisconnect) as exc_info:
        with client.websocket_connect("/ws?token=not-a-jwt") as ws:
            ws.receive_json()
    assert exc_info.value.code == 1008


def test_accepts_authorization_header(client, token):
    with client.websocket_connect("/ws", headers={"Authorization": f"Bearer {token}"}) as ws:
        assert ws.receive_json()["type"] == "connected"
