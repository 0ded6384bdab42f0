"""
필드별 clean 함수와 해석기.

- license: 라이선스 표현식 정규화
- repository: repo URL 해석
- url: stable/head URL 과 태그, 보간
- dependency: 조건 블록 제한/요구사항 스택
- formula: 필드 디스크립터 테이블과 파일 단위 추출
"""
