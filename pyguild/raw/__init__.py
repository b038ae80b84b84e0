from .channels import *
from .docs import *
from .gateway import *
from .list_items import *
from .messages import *
from .servers import *
from .users import *
from .webhooks import *
