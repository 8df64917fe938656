"""
Authentication service route handlers.

Provides routes for:
- Participant signup (JSON)
- Organizer signup (multipart, with identity document)
- Participant, organizer and admin login
- An example protected resource
- Organizer moderation (admin only)

Token logic is delegated to `auth_service.utils`, storage to
`auth_service.models`.
"""

import logging
from typing import Any, Dict, Tuple

from flask import Blueprint, Response, g, jsonify, request

from organiz.auth_service import models, uploads
from organiz.auth_service.models import ADMIN, ORGANIZER, PARTICIPANT, EmailAlreadyRegistered
from organiz.auth_service.passwords import hash_password, verify_password
from organiz.auth_service.utils import create_token, error_body, token_required
from organiz.auth_service.validation import (
    check_age,
    check_email,
    check_password,
    check_phone,
    first_error,
    normalize_email,
    parse_birth_date,
)
from organiz.config import get_settings

auth_bp = Blueprint("auth", __name__)

INVALID_CREDENTIALS = "Invalid credentials"
SERVER_ERROR = "Server error"


# --- REQUEST LOGGING ---
@auth_bp.before_request
def before_request() -> None:
    """
    Log every incoming request method and path.
    Headers are not logged since they carry bearer tokens.
    """
    logging.info(f"[Auth] Incoming {request.method} {request.path}")


@auth_bp.after_request
def after_request(response: Response) -> Response:
    logging.info(f"[Auth] Response {response.status}")
    return response


# --- SIGNUP (PARTICIPANT) ---
@auth_bp.route("/signup-participant", methods=["POST"])
def signup_participant() -> Tuple[Response, int]:
    """
    Register a new participant.

    Expects a JSON body with:
    - fullName (str)
    - email (str)
    - password (str): Minimum 8 characters.
    - phone (str): Exactly 10 digits.
    - birthDate (str): YYYY-MM-DD, at least 18 years ago.
    - acceptsTerms (bool)

    Returns:
        201: Registration accepted. No token; the participant logs in next.
        400: Missing or invalid field.
        409: Email already registered.
        500: Server-side error (hashing or database).
    """
    data: Dict[str, Any] = request.get_json(silent=True) or {}
    full_name = data.get("fullName")
    email = normalize_email(data.get("email"))
    password = data.get("password")
    phone = data.get("phone")
    birth_date_raw = data.get("birthDate")
    accepts_terms = data.get("acceptsTerms")

    if not all([full_name, email, password, phone, birth_date_raw, accepts_terms]):
        return error_body("All fields are required"), 400

    # JSON clients sometimes send the phone as a number
    full_name, password, phone = str(full_name).strip(), str(password), str(phone)

    error = first_error(check_email(email), check_password(password), check_phone(phone))
    if error:
        return error_body(error), 400

    birth_date = parse_birth_date(birth_date_raw)
    if birth_date is None:
        return error_body("Invalid birth date"), 400
    error = check_age(birth_date)
    if error:
        return error_body(error), 400

    try:
        models.create_participant(
            full_name, email, hash_password(password), phone, birth_date, True
        )
    except EmailAlreadyRegistered:
        return error_body("Email already registered"), 409
    except Exception:
        logging.exception("[Auth] Participant signup failed")
        return error_body(SERVER_ERROR), 500

    # Simulate sending verification email
    logging.info(f"[Auth] Verification email sent to {email}")

    return jsonify({
        "message": "Registration successful. Please check your email for verification."
    }), 201


# --- SIGNUP (ORGANIZER) ---
@auth_bp.route("/signup-organizer", methods=["POST"])
def signup_organizer() -> Tuple[Response, int]:
    """
    Register a new organizer. The account starts out pending and cannot log
    in until an admin approves it.

    Expects multipart form data with:
    - fullName, email, password, phone, idNumber (str)
    - portfolioLink (str, optional)
    - acceptsContract (str): Must be "true".
    - idDocument (file): jpeg/jpg/png/pdf, at most 5MB.

    Returns:
        201: Registration submitted for moderation.
        400: Bad document, missing or invalid field.
        409: Email already registered.
        500: Server-side error (hashing, disk or database).
    """
    settings = get_settings()
    form = request.form
    id_document = request.files.get("idDocument")
    if id_document is not None and not id_document.filename:
        id_document = None

    # The document is checked before any other field
    if id_document is not None:
        try:
            uploads.check_id_document(id_document, settings)
        except uploads.UploadRejected as e:
            return error_body(e.message), 400

    full_name = form.get("fullName")
    email = normalize_email(form.get("email"))
    password = form.get("password", "")
    phone = form.get("phone", "")
    id_number = form.get("idNumber")
    portfolio_link = form.get("portfolioLink") or None
    accepts_contract = form.get("acceptsContract")

    if not all([full_name, email, password, phone, id_number, id_document, accepts_contract]):
        return error_body("All required fields must be provided"), 400

    error = first_error(check_email(email), check_password(password), check_phone(phone))
    if error:
        return error_body(error), 400

    if accepts_contract != "true":
        return error_body("You must accept the contract"), 400

    document_path = None
    try:
        password_hash = hash_password(password)
        document_path = uploads.save_id_document(id_document, settings)
        models.create_organizer(
            full_name, email, password_hash, phone, id_number, document_path, portfolio_link
        )
    except EmailAlreadyRegistered:
        uploads.discard(document_path)
        return error_body("Email already registered"), 409
    except Exception:
        logging.exception("[Auth] Organizer signup failed")
        if document_path:
            uploads.discard(document_path)
        return error_body(SERVER_ERROR), 500

    # Simulate notifying the moderators
    logging.info(f"[Auth] Organizer registration submitted for {email}. Awaiting admin approval.")

    return jsonify({
        "message": "Registration submitted successfully. You will be notified after admin verification."
    }), 201


# --- LOGIN ---
def _credentials() -> Tuple[str, str]:
    data: Dict[str, Any] = request.get_json(silent=True) or {}
    password = data.get("password")
    return normalize_email(data.get("email")), password if isinstance(password, str) else ""


def _login(role: str) -> Tuple[Response, int]:
    """
    Shared login flow for the three roles.

    Unknown email and wrong password get the same 401 so callers cannot
    probe which emails are registered. Organizers must be approved; that
    check happens before the password is compared.
    """
    email, password = _credentials()
    if not email or not password:
        return error_body(INVALID_CREDENTIALS), 401

    try:
        account = models.find_account(role, email)
    except Exception:
        logging.exception(f"[Auth] {role} login lookup failed")
        return error_body(SERVER_ERROR), 500

    if not account:
        return error_body(INVALID_CREDENTIALS), 401

    if role == ORGANIZER and account.get("status") != models.STATUS_APPROVED:
        return error_body("Account pending approval or suspended"), 403

    if not verify_password(account["password_hash"], password):
        return error_body(INVALID_CREDENTIALS), 401

    token = create_token(account["id"], account["email"], role)

    if role == ADMIN:
        return jsonify({"token": token, "type": role}), 200

    return jsonify({
        "token": token,
        "id": account["id"],
        "email": account["email"],
        "type": role,
    }), 200


@auth_bp.route("/login-participant", methods=["POST"])
def login_participant() -> Tuple[Response, int]:
    """
    Authenticate a participant. Token valid for 9 hours.

    Returns:
        200: {token, id, email, type}
        401: Invalid credentials.
        500: Database error.
    """
    return _login(PARTICIPANT)


@auth_bp.route("/login-organizer", methods=["POST"])
def login_organizer() -> Tuple[Response, int]:
    """
    Authenticate an approved organizer. Token valid for 1 hour.

    Returns:
        200: {token, id, email, type}
        401: Invalid credentials.
        403: Account pending approval or suspended.
        500: Database error.
    """
    return _login(ORGANIZER)


@auth_bp.route("/login-admin", methods=["POST"])
def login_admin() -> Tuple[Response, int]:
    """
    Authenticate an admin. Token valid for 6 hours.

    Returns:
        200: {token, type}
        401: Invalid credentials.
        500: Database error.
    """
    return _login(ADMIN)


# --- PROTECTED EXAMPLE ---
@auth_bp.route("/protected", methods=["GET"])
@token_required
def protected() -> Tuple[Response, int]:
    """Any valid token, whatever its role, may read this resource."""
    return jsonify({"message": "This is a protected route", "user": g.user}), 200


# --- ORGANIZER MODERATION (ADMIN ONLY) ---
@auth_bp.route("/organizers", methods=["GET"])
@token_required(roles=[ADMIN])
def list_organizers() -> Tuple[Response, int]:
    """
    List organizers, optionally filtered with ?status=pending|approved|suspended.

    Returns:
        200: List of organizer objects (no password hashes).
        400: Unknown status filter.
        401/403: Unauthorized.
        500: Database error.
    """
    status = request.args.get("status")
    if status and status not in models.VALID_STATUSES:
        return error_body("Invalid status"), 400

    try:
        organizers = models.list_organizers(status)
    except Exception:
        logging.exception("[Auth] Listing organizers failed")
        return error_body(SERVER_ERROR), 500

    return jsonify(organizers), 200


@auth_bp.route("/organizers/<int:organizer_id>/status", methods=["POST"])
@token_required(roles=[ADMIN])
def set_organizer_status(organizer_id: int) -> Tuple[Response, int]:
    """
    Approve, suspend or reset an organizer account.

    Expects JSON:
        { "status": "pending" | "approved" | "suspended" }

    Returns:
        200: {id, email, status}
        400: Invalid status.
        401/403: Unauthorized.
        404: No organizer with this id.
        500: Database error.
    """
    data: Dict[str, Any] = request.get_json(silent=True) or {}
    status = data.get("status")
    if status not in models.VALID_STATUSES:
        return error_body("Invalid status"), 400

    try:
        organizer = models.set_organizer_status(organizer_id, status)
    except Exception:
        logging.exception("[Auth] Updating organizer status failed")
        return error_body(SERVER_ERROR), 500

    if not organizer:
        return error_body("Organizer not found"), 404

    # Simulate notifying the organizer
    logging.info(
        f"[Auth] Organizer {organizer['email']} set to {status} by admin {g.user.get('email')}"
    )

    return jsonify(organizer), 200
