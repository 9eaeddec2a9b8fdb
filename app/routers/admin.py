"""
admin.py

관리자(ADMIN) 전용 API 모음.

주요 기능:
- 회원 / 결제 현황 내보내기 (CSV, XLSX)
- 사용자 권한 변경

관련 파일:
- app.services.export    : 내보내기 행 / 워크북 생성
- app.services.admin     : 권한 변경 정책

"""

import csv
import io
import uuid
from datetime import date

from fastapi import APIRouter, Depends, HTTPException
from starlette.responses import StreamingResponse, Response
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.deps import get_db, get_current_admin
from app.models.user import User
from app.schemas.user import RoleUpdate
from app.services import admin as admin_service
from app.services.export import MEMBER_COLUMNS, member_rows, build_members_workbook

router = APIRouter(prefix="/admin", tags=["admin"])


"""
관리자용 회원 현황 CSV 다운로드 API

- 회원별 플랜 / 상태 / 기간 / 누적 결제 요약을 CSV 로 반환
- UTF-8 BOM을 추가하여 Excel에서 바로 열어도 깨지지 않도록 처리

"""
@router.get("/members/export")
def export_members_csv(
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    today = date.today()
    # 세션은 응답 스트리밍 전에 닫히므로 행을 먼저 조회
    rows = member_rows(db, today)

    def generate():
        # Excel에서 UTF-8 CSV 깨짐 방지를 위해 BOM(Byte Order Mark) 먼저 출력
        yield "\ufeff"

        output = io.StringIO()
        writer = csv.writer(output)

        writer.writerow(MEMBER_COLUMNS)
        yield output.getvalue()
        output.seek(0)
        output.truncate(0)

        for row in rows:
            writer.writerow(row)
            yield output.getvalue()
            output.seek(0)
            output.truncate(0)

    filename = f"members_{today.isoformat()}.csv"
    headers = {"Content-Disposition": f'attachment; filename="{filename}"'}
    return StreamingResponse(generate(), media_type="text/csv; charset=utf-8", headers=headers)


"""
관리자용 회원 현황 Excel(xlsx) 다운로드 API

- members 시트: 회원별 요약
- payments 시트: 전체 결제 내역 (최신순)

"""
@router.get("/members/export.xlsx")
def export_members_xlsx(
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    today = date.today()
    data = build_members_workbook(db, today)

    filename = f"members_{today.isoformat()}.xlsx"
    headers = {"Content-Disposition": f'attachment; filename="{filename}"'}
    return Response(
        content=data,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers=headers,
    )


# 관리자가 사용자 권한을 변경하는 엔드포인트
@router.patch("/users/{user_id}/role")
def set_role(
    user_id: uuid.UUID,
    data: RoleUpdate,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    user = db.scalar(select(User).where(User.id == user_id))
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    try:
        admin_service.set_role(db, actor=current_admin, user=user, role=data.role)
        db.commit()
        db.refresh(user)
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        db.rollback()
        raise

    return {
        "message": "Role updated",
        "data": {
            "id": str(user.id),
            "name": user.full_name,
            "email": user.email,
            "role": user.role.value,
        },
    }
