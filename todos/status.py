"""HTTP status codes used by the to-do API."""

HTTP_200_OK = 200
HTTP_201_CREATED = 201
HTTP_204_NO_CONTENT = 204
HTTP_503_SERVICE_UNAVAILABLE = 503
