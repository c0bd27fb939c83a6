import asyncio
import logging
import socket
import webbrowser
from contextlib import closing

import uvicorn
import resume_builder.config as cfg
import resume_builder.main as main_app

logger = logging.getLogger("run_app")


def _find_free_port(preferred: int) -> int:
	# Preferred port if it is free, else whatever the OS hands out
	with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
		try:
			s.bind(("127.0.0.1", preferred))
			return preferred
		except OSError:
			logger.info("port %d busy; picking another", preferred)
	with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
		s.bind(("127.0.0.1", 0))
		return s.getsockname()[1]


async def _open_browser_later(url: str, delay_seconds: float = 0.8) -> None:
	# Give uvicorn a moment to bind before the browser hits it
	await asyncio.sleep(delay_seconds)
	webbrowser.open(url)


async def _serve() -> None:
	port = _find_free_port(cfg.PREFERRED_PORT)
	url = f"http://127.0.0.1:{port}/builder"
	logger.info("serving resume builder at %s", url)
	if cfg.OPEN_BROWSER:
		asyncio.create_task(_open_browser_later(url))
	config = uvicorn.Config(app=main_app.app, host="127.0.0.1", port=port, log_level="info")
	server = uvicorn.Server(config)
	await server.serve()


def main() -> None:
	asyncio.run(_serve())


if __name__ == "__main__":
	main()
