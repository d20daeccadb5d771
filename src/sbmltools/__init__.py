__author__ = "The sbmltools development team."
__version__ = "0.3.0"


from sbmltools.core import Configuration
from sbmltools import io
from sbmltools import manipulation
from sbmltools import tissue
from sbmltools.util import show_versions
