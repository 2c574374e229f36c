from pumlsync.cli import app

app()
