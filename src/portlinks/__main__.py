from .main_loop import run

run()
