from mangum import Mangum

from todo_app.main import create_app

app = create_app(include_auth=False, title="Todo Lambda")

handler = Mangum(app)
