"""
UTILITIES PACKAGE
=================

Helpers used by the services (no HTTP calls):

  payload    - extract_payload / validate_payload / load_response_schema.
  mime_types - guess_mime_type(url, modality) and attachment modality detection.
  output     - format_output(): the response body shape; extract_generation_result().
"""
