"""Hello World — the simplest bunwork app.

Demonstrates routes, path parameters, query parameters, a global logging
middleware, and a blueprint with its own gatekeeping middleware.

Run:
    python app.py
"""

from bunwork import Blueprint, Bunwork, Response, request_logger

USERS = [
    {"id": 1, "name": "Alex"},
    {"id": 2, "name": "John"},
    {"id": 3, "name": "Happer"},
]

users = Blueprint("/users")


@users.middleware
def reject_authorization(request, next):
    if "authorization" not in request.headers:
        next()


@users.get("/:id")
def show_user(request):
    user_id = request.params["id"]
    found = next((user for user in USERS if str(user["id"]) == user_id), {})
    return Response.json(found)


app = Bunwork()
app.middleware(request_logger)


@app.get("/")
def index(request):
    return Response(f"Hello, {request.query.get('name', 'World')}!")


@app.get("/greet")
def greet(request):
    name = request.query.get("name", "Guest")
    age = request.query.get("age", "unknown")
    return Response(f"Hello, {name}! You are {age} years old.")


@app.get("/hello/:username")
def hello(request):
    return Response(f"Hello, {request.params['username']}!")


@app.get("/custom")
def custom(request):
    return Response("Created").with_status(201).with_header("X-Custom", "bunwork")


app.register_blueprint(users)


if __name__ == "__main__":
    import logging

    logging.basicConfig(level=logging.INFO)
    app.listen(3000, lambda: print("Listening on http://127.0.0.1:3000"))
