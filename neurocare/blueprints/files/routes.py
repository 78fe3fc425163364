import mimetypes
import os
from flask import abort, current_app, send_file
from . import bp
from ...services import storage

@bp.get("/<token>")
def download(token):
    """Serve a locally stored file behind a signed, expiring token.

    Used for the local backend only; S3 hands out presigned URLs directly.
    """
    path = storage.resolve_signed_token(token)
    if not path:
        abort(404)
    full = storage.local_file_path(path)
    if not os.path.isfile(full):
        abort(404)
    current_app.logger.info("signed download of %s", path)
    return send_file(full, mimetype=mimetypes.guess_type(full)[0] or "application/octet-stream",
                     download_name=path.rsplit("/", 1)[-1])
