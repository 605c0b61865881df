import os
import sys
from datetime import datetime

sys.path.insert(0, os.path.abspath('..'))

import unifi_client_manager  # noqa: E402

project = 'unifi-client-manager'
copyright = f'{datetime.now().year}, unifi-client-manager contributors'
author = 'unifi-client-manager contributors'

release = getattr(unifi_client_manager, '__version__', '0.1.0')

# -- General configuration ---------------------------------------------------
extensions = [
    'sphinx.ext.autodoc',
    'sphinx.ext.autosummary',
    'sphinx.ext.viewcode',
    'sphinx.ext.napoleon',
    'sphinx.ext.intersphinx',
    'sphinx_autodoc_typehints',
]

autosummary_generate = True
autodoc_member_order = 'bysource'
autoclass_content = 'both'
autodoc_typehints = 'description'

exclude_patterns = ['_build', 'Thumbs.db', '.DS_Store', '_autosummary']


def skip_web_internals(app, what, name, obj, skip, options):
    if what == 'module' and name.startswith('unifi_client_manager.web.'):
        return True
    return skip


def setup(app):
    app.connect('autodoc-skip-member', skip_web_internals)


templates_path = ['_templates']
html_theme = 'sphinx_rtd_theme'
html_static_path = ['_static']
html_title = f"{project} Documentation"

intersphinx_mapping = {
    'python': ('https://docs.python.org/3', None),
    'requests': ('https://requests.readthedocs.io/en/latest/', None),
    'flask': ('https://flask.palletsprojects.com/en/latest/', None),
    'sqlalchemy': ('https://docs.sqlalchemy.org/en/20/', None),
}

napoleon_google_docstring = True
napoleon_numpy_docstring = False
napoleon_include_init_with_doc = True
napoleon_use_param = True
napoleon_use_rtype = True
