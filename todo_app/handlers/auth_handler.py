from mangum import Mangum

from todo_app.main import create_app

app = create_app(include_todos=False, title="Auth Lambda")

handler = Mangum(app)
