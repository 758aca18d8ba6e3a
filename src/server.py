#!/usr/bin/env python

import os
import sys

from gevent import monkey
monkey.patch_all()

from gevent.pywsgi import WSGIServer

from fieldsweep.flaskapp import create_app_from_env

import logging

log = logging.getLogger()
log.setLevel(logging.DEBUG)

handler = logging.StreamHandler(sys.stdout)
handler.setLevel(logging.DEBUG)
formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
handler.setFormatter(formatter)
log.addHandler(handler)


app = create_app_from_env()


if __name__ == '__main__':
    host = os.getenv('FLASK_RUN_HOST', '0.0.0.0')
    port = int(os.getenv('FLASK_RUN_PORT', 8000))
    log.info("Serving fieldsweep on %s:%s", host, port)
    WSGIServer((host, port), app).serve_forever()
