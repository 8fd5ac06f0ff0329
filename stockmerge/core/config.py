from typing import List

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class MergeSettings(BaseModel):
	"""合并相关配置。支持嵌套环境变量：
	- SMG_MERGE__DEFAULT_SHEET_NAME
	- SMG_MERGE__HEADER_SKIP_ROWS
	- SMG_MERGE__KEY_SEPARATOR
	- SMG_MERGE__VALUE_COLUMNS：JSON（["J","K"]）或逗号分隔（"J,K"）
	- SMG_MERGE__OUTPUT_FILENAME_PREFIX
	- SMG_MERGE__MAX_UPLOAD_FILES
	"""

	default_sheet_name: str = Field(default="Sheet1", description="默认读取/输出的 Sheet 名称")
	header_skip_rows: int = Field(
		default=3, ge=0, description="每个 Sheet 开头丢弃的模板行数"
	)
	key_separator: str = Field(default="_", description="复合键拼接分隔符")
	value_columns: List[str] = Field(
		default_factory=lambda: ["J", "K"],
		description="请求未指定时参与求和的列（재고 / 가용재고）",
	)
	output_filename_prefix: str = Field(
		default="stock_merge", description="输出文件名前缀"
	)
	max_upload_files: int = Field(
		default=50, ge=1, description="单次请求允许上传的文件数上限"
	)

	@field_validator("value_columns", mode="before")
	@classmethod
	def _parse_value_columns(cls, v):
		if v is None:
			return []
		if isinstance(v, str):
			val = v.strip()
			# 优先尝试 JSON
			if val.startswith("[") and val.endswith("]"):
				import json
				try:
					return json.loads(val)
				except json.JSONDecodeError:
					pass
			# 退化为逗号分隔
			return [item.strip() for item in val.split(",") if item.strip()]
		return v


class Settings(BaseSettings):

	app_name: str = "Stock Merge API"
	debug: bool = True
	reload: bool = True
	host: str = "127.0.0.1"
	port: int = 8000
	log_level: str = "INFO"

	# 嵌套配置
	merge: MergeSettings = Field(default_factory=MergeSettings)

	model_config = SettingsConfigDict(
		env_prefix="SMG_",
		case_sensitive=False,
		env_nested_delimiter="__",
		env_file=".env",
		env_file_encoding="utf-8",
	)


settings = Settings()
