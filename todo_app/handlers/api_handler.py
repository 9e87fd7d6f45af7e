from mangum import Mangum

from todo_app.main import app

handler = Mangum(app)
