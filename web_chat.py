#!/usr/bin/env python3
"""
Web API for the Incorpify incorporation chat.

Features:
- One IncorporationChatAgent per chat session
- Branching questionnaire: single-select answers, multi-select toggles + submit
- "Question N of M" progress on every response
- Lead capture: contact details + answers handed to the configured lead sink

Run:
    python3 web_chat.py

Then open: http://localhost:5001
"""

import logging
import secrets
import threading

from flask import Flask, jsonify, request

from incorpify.agents.incorporation_chat_agent import IncorporationChatAgent
from incorpify.config import load_config
from incorpify.exceptions import (
    CatalogIntegrityError,
    InvalidContactError,
    LeadSinkError,
    RejectedEvent,
    SessionNotCompleteError,
)
from incorpify.leads.sink import ContactDetails, create_lead_sink
from incorpify.logging_config import configure_logging
from incorpify.schemas.questions import DEFAULT_CATALOG

config = load_config()
configure_logging(config.log_level)
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.secret_key = secrets.token_hex(16)

# Store agents per session
sessions = {}
sessions_lock = threading.Lock()

lead_sink = create_lead_sink(config)


def _state_payload(agent: IncorporationChatAgent, **extra) -> dict:
    payload = agent.get_summary()
    payload["answer_delay_ms"] = config.answer_delay_ms
    payload.update(extra)
    return payload


def _get_agent(session_id):
    with sessions_lock:
        entry = sessions.get(session_id)
    return entry["agent"] if entry else None


def _event_args(*names):
    data = request.get_json(silent=True) or {}
    return data, [data.get(name) for name in names]


@app.route('/')
def index():
    return jsonify({
        'service': 'incorpify-chat',
        'endpoints': [
            'POST /api/start',
            'GET /api/state',
            'POST /api/answer',
            'POST /api/toggle',
            'POST /api/submit-multi',
            'POST /api/lead',
            'GET /api/catalog',
        ],
    })


@app.route('/api/start', methods=['POST'])
def start_chat():
    session_id = secrets.token_hex(8)
    agent = IncorporationChatAgent()

    with sessions_lock:
        sessions[session_id] = {'agent': agent, 'lead': None}

    logger.info("Chat session %s started", session_id)
    return jsonify(_state_payload(agent, session_id=session_id))


@app.route('/api/state', methods=['GET'])
def get_state():
    session_id = request.args.get('session_id')
    agent = _get_agent(session_id)
    if agent is None:
        return jsonify({'error': 'Invalid session'}), 400

    return jsonify(_state_payload(agent, session_id=session_id))


@app.route('/api/answer', methods=['POST'])
def answer():
    _, (session_id, question_id, option_id) = _event_args('session_id', 'question_id', 'option_id')
    agent = _get_agent(session_id)
    if agent is None:
        return jsonify({'error': 'Invalid session'}), 400

    try:
        turns = agent.submit_single(question_id, option_id)
    except RejectedEvent as e:
        return jsonify({'error': str(e), 'rejected': True}), 409
    except CatalogIntegrityError as e:
        logger.error("Catalog error in session %s: %s", session_id, e)
        return jsonify({'error': str(e)}), 500

    return jsonify(_state_payload(
        agent, session_id=session_id, new_turns=[t.to_dict() for t in turns]
    ))


@app.route('/api/toggle', methods=['POST'])
def toggle():
    _, (session_id, question_id, option_id) = _event_args('session_id', 'question_id', 'option_id')
    agent = _get_agent(session_id)
    if agent is None:
        return jsonify({'error': 'Invalid session'}), 400

    try:
        selection = agent.toggle_multi(question_id, option_id)
    except RejectedEvent as e:
        return jsonify({'error': str(e), 'rejected': True}), 409

    return jsonify({'session_id': session_id, 'question_id': question_id, 'selection': selection})


@app.route('/api/submit-multi', methods=['POST'])
def submit_multi():
    _, (session_id, question_id) = _event_args('session_id', 'question_id')
    agent = _get_agent(session_id)
    if agent is None:
        return jsonify({'error': 'Invalid session'}), 400

    try:
        turns = agent.submit_multi(question_id)
    except RejectedEvent as e:
        return jsonify({'error': str(e), 'rejected': True}), 409

    return jsonify(_state_payload(
        agent, session_id=session_id, new_turns=[t.to_dict() for t in turns]
    ))


@app.route('/api/lead', methods=['POST'])
def submit_lead():
    data, (session_id,) = _event_args('session_id')
    agent = _get_agent(session_id)
    if agent is None:
        return jsonify({'error': 'Invalid session'}), 400

    contact = ContactDetails(
        name=data.get('name', ''),
        email=data.get('email', ''),
        phone=data.get('phone', ''),
    )

    try:
        lead = agent.submit_lead(contact, lead_sink)
    except SessionNotCompleteError as e:
        return jsonify({'error': str(e)}), 409
    except InvalidContactError as e:
        return jsonify({'error': 'Invalid contact details', 'errors': e.errors}), 422
    except LeadSinkError as e:
        logger.error("Lead hand-off failed for session %s: %s", session_id, e)
        return jsonify({'error': str(e)}), 502

    with sessions_lock:
        sessions[session_id]['lead'] = lead

    return jsonify({'saved': True, 'lead': lead})


@app.route('/api/catalog', methods=['GET'])
def catalog():
    return jsonify(DEFAULT_CATALOG.to_dict())


if __name__ == '__main__':
    print("\n" + "=" * 60)
    print("  Incorpify Incorporation Chat - Web API")
    print("=" * 60)
    print(f"\n  Lead sink: {lead_sink.name}")
    print("\n  Open in your browser: http://localhost:5001")
    print("\n  Press Ctrl+C to stop\n")
    print("=" * 60 + "\n")

    app.run(debug=False, port=5001, threaded=True)
