"""
Document upload routes
"""

import mimetypes
from flask import Blueprint, Response, current_app, request, jsonify
from werkzeug.exceptions import RequestEntityTooLarge
from clearflow.services import AuthService, LocalBlobStore, get_blob_store, prepare_upload
from clearflow.services.blob_service import LOCAL_URL_PREFIX
from clearflow.utils import (
    ClearflowException, FileUploadError, NotFoundError, log_error, log_info,
    validate_file_extension, create_response, error_response
)

document_bp = Blueprint('documents', __name__)


@document_bp.route('/documents', methods=['POST'])
def upload_document():
    """Store an SSC/HSC certificate or signature and return its URL"""
    try:
        principal = AuthService.require_auth()

        file = request.files.get('file')
        if not file or not file.filename:
            raise FileUploadError("No file provided")
        if not validate_file_extension(file.filename, current_app.config['ALLOWED_EXTENSIONS']):
            raise FileUploadError("Only PNG, JPEG and PDF documents are allowed")

        data, content_type = prepare_upload(file.read(), file.mimetype)
        url = get_blob_store().store(data, content_type)
        log_info(f"Document uploaded by {principal.role} {principal.subject_id}: {url}")
        return jsonify(create_response(True, "Document uploaded", {
            'url': url,
            'content_type': content_type,
            'size': len(data)
        })), 201

    except ClearflowException as e:
        return error_response(e)
    except RequestEntityTooLarge:
        raise
    except Exception as e:
        log_error("Document upload error", e)
        return jsonify(create_response(False, "Failed to upload document")), 500


@document_bp.route('/documents/<key>', methods=['GET'])
def fetch_document(key):
    """Stream a locally stored document back"""
    try:
        AuthService.require_auth()
        store = get_blob_store()
        if not isinstance(store, LocalBlobStore):
            raise NotFoundError("Documents are served from object storage")
        data = store.fetch(f"{LOCAL_URL_PREFIX}{key}")
        mimetype = mimetypes.guess_type(key)[0] or 'application/octet-stream'
        return Response(data, mimetype=mimetype)

    except ClearflowException as e:
        return error_response(e)
    except Exception as e:
        log_error("Document fetch error", e)
        return jsonify(create_response(False, "Failed to get document")), 500
