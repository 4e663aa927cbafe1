# tenant_portability/models/__init__.py

from .tenant import Tenant
from .media import SoftDeleteMixin, MediaFolder, Media
from .taxonomy import Category, Tag
from .page import Page, PageLayout, PageVersion, PageComponent
from .post import Post, PostCategory, PostTag
