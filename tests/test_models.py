from datetime import datetime

from app.models.base import BaseModel
from app.models.taxonomy import Tag
from app.services.tag_service import TagService


class TestBaseModel:

    def test_persistence_goes_through_services(self):
        # 模型只负责映射与序列化，事务由服务层通过 db.session 管理
        assert not hasattr(BaseModel, 'save')
        assert not hasattr(BaseModel, 'delete')

    def test_to_dict_serializes_datetimes(self, editor):
        tag = TagService.create({'name': 'Energy'}, editor)
        data = tag.to_dict()
        assert data['name'] == 'Energy'
        assert datetime.fromisoformat(data['created_at']) == tag.created_at
        assert set(data) == {c.name for c in Tag.__table__.columns}
