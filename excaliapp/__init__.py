"""
Drawing storage core for excaliapp.

Three interchangeable storage backends behind a single service facade, plus
the FastAPI service that backs the remote backend.
"""
