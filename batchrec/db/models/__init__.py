from .common import *  # noqa
from .auth import *  # noqa
from .master import *  # noqa
from .reports import *  # noqa
from .bmr import *  # noqa
