import logging
import os

# ALNPY_DEBUG=1 shows parser debug output (module, line number) while testing
if os.environ.get('ALNPY_DEBUG'):
    logging.basicConfig(
        level='DEBUG', format='%(asctime)s %(name)15s:%(lineno)-5s %(levelname)-8s | %(message)s')
else:
    logging.basicConfig(
        level='INFO', format='%(asctime)s %(levelname)-8s | %(message)s', datefmt='%Y-%m-%d %H:%M')
