from flask import jsonify

from library.services.errors import LibraryError


def json_error(err: LibraryError):
    return jsonify(err.to_dict()), err.status_code
