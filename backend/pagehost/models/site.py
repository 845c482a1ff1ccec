import uuid
from datetime import datetime

from sqlalchemy import DateTime, UniqueConstraint
from sqlmodel import Field, Relationship, SQLModel


# 数据库模型：一个主机名对应一个站点
class Site(SQLModel, table=True):
    __tablename__ = "site"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    # 小写存储，比较时不区分大小写
    hostname: str = Field(max_length=253, unique=True, index=True)
    update_time: datetime = Field(sa_type=DateTime(timezone=True))
    files: list["StoredFile"] = Relationship(back_populates="site", cascade_delete=True)


# 数据库模型：站点内的单个文件，(site_id, path) 唯一
class StoredFile(SQLModel, table=True):
    __tablename__ = "site_file"
    __table_args__ = (UniqueConstraint("site_id", "path", name="uq_site_file_site_path"),)

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    site_id: uuid.UUID = Field(foreign_key="site.id", nullable=False, ondelete="CASCADE")
    path: str = Field(max_length=1024)
    blob: bytes
    content_hash: str = Field(max_length=64)  # SHA-256 hex
    size: int
    update_time: datetime = Field(sa_type=DateTime(timezone=True))
    site: Site | None = Relationship(back_populates="files")


# 上传成功后返回的摘要
class SiteSummary(SQLModel):
    hostname: str
    file_count: int
    update_time: datetime


# 解析结果：文件内容和响应元数据
class ResolvedFile(SQLModel):
    path: str
    content: bytes
    media_type: str
    content_hash: str
    last_modified: datetime
