from sbmltools.core.configuration import Configuration
from sbmltools.core.singleton import Singleton
